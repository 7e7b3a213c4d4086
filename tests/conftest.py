"""Shared test fixtures for mcpgen.

Provides a small pet store document (as a raw dict, a dereferenced
:class:`~mcpgen.models.Document`, and a file on disk), isolated config
environments, output/logging state resets, and a CLI runner. These fixtures
are automatically discovered by pytest.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

import pytest

from mcpgen.models import Document
from mcpgen.output import OutputFormat, OutputManager, reset_output, set_output
from mcpgen.parser.resolver import dereference


PETSTORE: dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Pet Store API", "version": "1.2.0"},
    "servers": [{"url": "https://petstore.example.com/v1"}],
    "paths": {
        "/pets": {
            "get": {
                "operationId": "listPets",
                "summary": "List pets",
                "parameters": [
                    {
                        "name": "limit",
                        "in": "query",
                        "schema": {"type": "integer", "minimum": 1, "maximum": 100},
                    },
                    {
                        "name": "X-Request-ID",
                        "in": "header",
                        "description": "Trace id",
                        "schema": {"type": "string"},
                    },
                ],
                "responses": {"200": {"description": "ok"}},
            },
            "post": {
                "operationId": "createPet",
                "summary": "Create a pet",
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/json": {"schema": {"$ref": "#/components/schemas/NewPet"}}
                    },
                },
                "responses": {"201": {"description": "created"}},
            },
        },
        "/pets/{petId}": {
            "parameters": [
                {"name": "petId", "in": "path", "required": True, "schema": {"type": "string"}}
            ],
            "get": {"summary": "Get a pet", "responses": {"200": {"description": "ok"}}},
            "delete": {
                "operationId": "deletePet",
                "description": "Remove a pet\nfor good",
                "responses": {"204": {"description": "gone"}},
            },
            "options": {"responses": {"200": {"description": "ok"}}},
        },
    },
    "components": {
        "schemas": {
            "NewPet": {
                "type": "object",
                "required": ["name"],
                "properties": {
                    "name": {"type": "string"},
                    "tag": {"type": "string", "enum": ["dog", "cat"]},
                    "age": {"type": ["integer", "null"]},
                    "meta": {"type": "object"},
                },
            }
        }
    },
}


# ---------------------------------------------------------------------------
# Auto-reset global output and logging state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and the ``mcpgen`` logger after every test.

    Both cache references to the streams CliRunner swaps in for a test.
    Once those streams are closed, a stale reference fails with "I/O
    operation on closed file", and a non-propagating logger would also hide
    records from ``caplog``.
    """
    yield
    reset_output()
    logger = logging.getLogger("mcpgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_raw() -> dict[str, Any]:
    """A fresh copy of the raw pet store document (with ``$ref`` pointers)."""
    return copy.deepcopy(PETSTORE)


@pytest.fixture
def petstore_doc(petstore_raw: dict[str, Any]) -> Document:
    """The pet store document, dereferenced and wrapped in a Document view."""
    return Document.model_validate(dereference(petstore_raw))


@pytest.fixture
def petstore_file(tmp_path: Path, petstore_raw: dict[str, Any]) -> Path:
    """The pet store document written to ``tmp_path/petstore.json``."""
    path = tmp_path / "petstore.json"
    path.write_text(json.dumps(petstore_raw), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate data directories and ``MCPGEN_*`` variables.

    Points ``XDG_DATA_HOME`` into *tmp_path*, clears every environment
    variable mcpgen or a generated server reads, and changes the working
    directory to *tmp_path* so no real ``mcpgen.json`` is picked up.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ["MCPGEN_TRANSPORT", "MCPGEN_HEADER_MODE", "MCPGEN_BASE_URL", "API_BASE_URL"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, plain-format OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()

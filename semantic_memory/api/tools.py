"""
Tool catalogue and dispatcher shared by the MCP and HTTP surfaces.

Every call returns a JSON-compatible dict with a `success` flag. Faults are
converted into `{"success": False, "error": ...}`; nothing raised by a store
escapes `dispatch`.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .schemas import (
    EmptyRequest,
    MemoryIdRequest,
    SaveMemoryRequest,
    SearchMemoryRequest,
    SetUserBioRequest,
    UpdateUserBioRequest,
)
from ..core.bio_store import BiographyStore
from ..core.errors import MemoryServerError, ValidationError
from ..core.memory_store import MemoryStore
from ..util.logging import logger


@dataclass
class ToolSpec:
    name: str
    description: str
    request_model: Type[BaseModel]

    def input_schema(self) -> Dict[str, Any]:
        schema = self.request_model.model_json_schema()
        schema.pop("title", None)
        schema.pop("description", None)
        schema.setdefault("properties", {})
        return schema

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description, "inputSchema": self.input_schema()}


TOOL_SPECS: List[ToolSpec] = [
    ToolSpec(
        "save_memory",
        "Save a memory with semantic search capability. The text will be embedded and stored for later retrieval.",
        SaveMemoryRequest,
    ),
    ToolSpec(
        "search_memory",
        "Search memories using semantic similarity. Returns the most relevant memories based on the query text.",
        SearchMemoryRequest,
    ),
    ToolSpec("get_memory", "Get a specific memory by its ID", MemoryIdRequest),
    ToolSpec("delete_memory", "Delete a memory by its ID", MemoryIdRequest),
    ToolSpec("list_all_memories", "List all memory IDs and their metadata", EmptyRequest),
    ToolSpec(
        "get_user_bio",
        "Get the user's biographical information. Returns a structured profile with basic info, "
        "tech stack, and personal details. All fields are optional.",
        EmptyRequest,
    ),
    ToolSpec(
        "set_user_bio",
        "Set or update the complete user biography. All fields are optional - you can provide only "
        "the fields you want to set. Other fields will remain unchanged if bio already exists, or be "
        "null if creating new. Pass null to clear a field.",
        SetUserBioRequest,
    ),
    ToolSpec(
        "update_user_bio",
        "Update a specific field in the user's biography. Only updates the specified field, "
        "leaving others unchanged.",
        UpdateUserBioRequest,
    ),
]

TOOLS_BY_NAME: Dict[str, ToolSpec] = {spec.name: spec for spec in TOOL_SPECS}


def list_tools() -> List[Dict[str, Any]]:
    return [spec.to_dict() for spec in TOOL_SPECS]


def format_validation_error(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "arguments"
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "Invalid arguments: " + "; ".join(parts)


class ToolDispatcher:
    """Routes named tool calls to the memory and biography stores."""

    def __init__(self, memories: MemoryStore, bio: BiographyStore):
        self.memories = memories
        self.bio = bio
        self._handlers: Dict[str, Callable[[Any], Dict[str, Any]]] = {
            "save_memory": self.save_memory,
            "search_memory": self.search_memory,
            "get_memory": self.get_memory,
            "delete_memory": self.delete_memory,
            "list_all_memories": self.list_all_memories,
            "get_user_bio": self.get_user_bio,
            "set_user_bio": self.set_user_bio,
            "update_user_bio": self.update_user_bio,
        }

    def has_tool(self, name: str) -> bool:
        return name in self._handlers

    def dispatch(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        started = time.perf_counter()
        try:
            spec = TOOLS_BY_NAME.get(name)
            if spec is None:
                raise ValidationError(f"Unknown tool: {name}")
            try:
                request = spec.request_model.model_validate(arguments or {})
            except PydanticValidationError as e:
                raise ValidationError(format_validation_error(e)) from e
            response = self._handlers[name](request)
        except MemoryServerError as e:
            logger.log_tool_call(name, False, (time.perf_counter() - started) * 1000, str(e))
            return {"success": False, "error": str(e)}
        except Exception as e:
            logger.exception(f"Unexpected failure in tool {name}")
            return {"success": False, "error": str(e) or e.__class__.__name__}

        logger.log_tool_call(name, response.get("success", False), (time.perf_counter() - started) * 1000)
        return response

    # Memory tools

    def save_memory(self, request: SaveMemoryRequest) -> Dict[str, Any]:
        result = self.memories.save(request.id, request.text, request.metadata)
        verb = "updated" if result.was_update else "saved"
        return {
            "success": True,
            "message": f"Memory {verb} with ID: {result.id}",
            "id": result.id,
            "updated": result.was_update,
        }

    def search_memory(self, request: SearchMemoryRequest) -> Dict[str, Any]:
        outcome = self.memories.search(request.query, request.n_results, request.threshold)
        response: Dict[str, Any] = {
            "success": True,
            "query": request.query,
            "results": [hit.to_dict() for hit in outcome.results],
        }
        if outcome.empty_store:
            response["message"] = "No memories stored yet"
        return response

    def get_memory(self, request: MemoryIdRequest) -> Dict[str, Any]:
        memory = self.memories.get(request.id)
        if memory is None:
            return {"success": False, "message": f"Memory with ID {request.id} not found"}
        return {"success": True, "memory": memory.to_dict()}

    def delete_memory(self, request: MemoryIdRequest) -> Dict[str, Any]:
        if not self.memories.delete(request.id):
            return {"success": False, "message": f"Memory with ID {request.id} not found"}
        return {"success": True, "message": f"Memory with ID {request.id} deleted"}

    def list_all_memories(self, request: EmptyRequest) -> Dict[str, Any]:
        summaries = self.memories.list_all()
        return {
            "success": True,
            "count": len(summaries),
            "memories": [summary.to_dict() for summary in summaries],
        }

    # Biography tools

    def get_user_bio(self, request: EmptyRequest) -> Dict[str, Any]:
        biography = self.bio.get()
        if biography is None:
            return {"success": True, "bio": None, "message": "No user biography set yet"}
        return {"success": True, "bio": biography.to_dict()}

    def set_user_bio(self, request: SetUserBioRequest) -> Dict[str, Any]:
        created = self.bio.upsert(request.to_updates())
        return {
            "success": True,
            "message": "User biography created" if created else "User biography updated",
            "created": created,
        }

    def update_user_bio(self, request: UpdateUserBioRequest) -> Dict[str, Any]:
        if not self.bio.patch(request.field, request.value):
            return {
                "success": False,
                "message": "No user biography exists. Use set_user_bio to create one first.",
            }
        return {"success": True, "message": f"Updated field: {request.field}"}

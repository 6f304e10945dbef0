#!/usr/bin/env python3
"""
Postman Collection v2.1 document model.

Field names and nesting follow the Postman import format exactly; do not
rename fields here without checking that Postman still imports the file.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from config import COLLECTION_NAME, COLLECTION_SCHEMA
from errors import OutputWriteError
from models import EndpointRecord, Parameter, URLENCODED

logger = logging.getLogger(__name__)

BASE_URL_HOST = "{{base_url}}"


# =========================
#  Document model
# =========================
class KeyValue(BaseModel):
    key: str = ""
    value: str = ""
    description: str = ""
    type: str = ""


class Body(BaseModel):
    mode: str = URLENCODED
    urlencoded: List[KeyValue] = Field(default_factory=list)


class Url(BaseModel):
    raw: str = ""
    host: List[str] = Field(default_factory=lambda: [BASE_URL_HOST])
    path: List[str] = Field(default_factory=list)
    query: List[KeyValue] = Field(default_factory=list)
    variable: List[KeyValue] = Field(default_factory=list)


class Request(BaseModel):
    method: str = ""
    header: List[str] = Field(default_factory=list)
    body: Body = Field(default_factory=Body)
    url: Url = Field(default_factory=Url)
    description: str = ""


class Item(BaseModel):
    name: str = ""
    request: Request = Field(default_factory=Request)


class Info(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = COLLECTION_NAME
    schema_: str = Field(default=COLLECTION_SCHEMA, alias="schema")


class ApiKey(BaseModel):
    key: str
    value: str
    type: str = "string"


def _default_api_key() -> List[ApiKey]:
    return [
        ApiKey(key="in", value="query"),
        ApiKey(key="key", value="apiKey"),
        ApiKey(key="value", value="{{api_key}}"),
    ]


class Auth(BaseModel):
    type: str = "apikey"
    apikey: List[ApiKey] = Field(default_factory=_default_api_key)


class PostmanCollection(BaseModel):
    info: Info = Field(default_factory=Info)
    item: List[Item] = Field(default_factory=list)
    auth: Auth = Field(default_factory=Auth)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


# =========================
#  Record -> document
# =========================
def key_value(param: Parameter) -> KeyValue:
    return KeyValue(key=param.key, value=param.type_annotation, description=param.description)


def build_item(record: EndpointRecord) -> Item:
    return Item(
        name=record.name,
        request=Request(
            method=record.method,
            header=[],
            body=Body(
                mode=record.body.mode,
                urlencoded=[key_value(p) for p in record.body.urlencoded],
            ),
            url=Url(
                raw=record.url,
                host=[BASE_URL_HOST],
                path=list(record.path_segments),
                query=[key_value(p) for p in record.query_params],
                variable=[key_value(p) for p in record.path_params],
            ),
            description=record.description,
        ),
    )


def build_collection(records: Iterable[EndpointRecord],
                     name: str = COLLECTION_NAME) -> PostmanCollection:
    return PostmanCollection(
        info=Info(name=name),
        item=[build_item(record) for record in records],
    )


# =========================
#  File I/O
# =========================
def save_collection(collection: PostmanCollection, path: Union[str, Path]) -> Path:
    """
    Write the collection as indented JSON.

    The file is written next to the destination and renamed into place, so
    an interrupted write never leaves a truncated collection behind.

    Raises:
        OutputWriteError: destination cannot be created or written
    """
    path = Path(path)
    text = collection.to_json()
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as f:
            tmp_name = f.name
            f.write(text)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise OutputWriteError(f"cannot write {path}: {e}", e) from e

    logger.info(f"💾 Collection with {len(collection.item)} requests saved to {path}")
    return path


def load_collection(path: Union[str, Path]) -> PostmanCollection:
    """Read a collection file written by save_collection (or exported by Postman)."""
    text = Path(path).read_text(encoding="utf-8")
    try:
        return PostmanCollection.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ValueError(f"{path} is not a Postman v2.1 collection: {e}") from e

"""Schemas: the ordered field table of a value shape.

A schema is built once per shape and never changes afterwards. Fields
are opted in either on a dataclass::

    @dataclass
    class Entry:
        name: str = data_member(default="")
        tags: List[str] = data_member(default_factory=list)
        note: str = ""  # not serialized

or with ``Annotated`` on any annotated class::

    class Entry:
        name: Annotated[str, DataMember]

or declared explicitly with :class:`SchemaBuilder`.

The wire format is positional. A reader must use a schema with the same
fields in the same order as the writer's: a reordered schema whose field
types happen to be byte-compatible decodes without error into the wrong
fields. Keeping writer and reader schemas identical is the caller's job.
"""

import dataclasses
import operator
import threading
from dataclasses import dataclass, field
from typing import (
    Annotated,
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Optional,
    Tuple,
    get_args,
    get_origin,
    get_type_hints,
)

from binserial.exceptions import SerializationError, UnsupportedTypeError
from binserial.logging import get_logger
from binserial.serialization.types import WireCategory, resolve, strip_annotated, type_name

DATA_MEMBER_KEY = "binserial.data_member"

_logger = get_logger("schema")


class DataMember:
    """Marker that opts a field into serialization.

    Use the class itself as ``Annotated`` metadata.
    """

    def __repr__(self) -> str:
        return "DataMember"


def data_member(**kwargs) -> Any:
    """Create a dataclass field that is serialized.

    Accepts the keyword arguments of :func:`dataclasses.field`.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[DATA_MEMBER_KEY] = True
    return field(metadata=metadata, **kwargs)


@dataclass(frozen=True)
class FieldDescriptor:
    """One serializable field: name, accessor pair and wire category.

    The name is only used in diagnostics; it is never encoded.
    """

    name: str
    category: WireCategory
    getter: Callable[[Any], Any] = field(repr=False, compare=False)
    setter: Callable[[Any, Any], None] = field(repr=False, compare=False)
    index: int = 0

    @classmethod
    def attribute(cls, name: str, declared_type: Any, index: int = 0) -> "FieldDescriptor":
        """Create a descriptor reading and assigning a plain attribute."""
        return cls(
            name=name,
            category=resolve(declared_type),
            getter=operator.attrgetter(name),
            setter=_attribute_setter(name),
            index=index,
        )

    def get(self, obj: Any) -> Any:
        return self.getter(obj)

    def set(self, obj: Any, value: Any) -> None:
        self.setter(obj, value)


def _attribute_setter(name: str) -> Callable[[Any, Any], None]:
    def setter(obj: Any, value: Any) -> None:
        setattr(obj, name, value)

    return setter


@dataclass(frozen=True)
class Schema:
    """Immutable ordered field table for one value shape.

    An empty schema means whole-value mode: the value itself is encoded
    under ``value_category``.
    """

    shape: Any
    fields: Tuple[FieldDescriptor, ...] = ()
    value_category: Optional[WireCategory] = None

    def __post_init__(self):
        if not self.fields and self.value_category is None:
            raise UnsupportedTypeError(
                type_name(self.shape),
                f"Type '{type_name(self.shape)}' has no serializable fields "
                "and is not itself serializable",
            )

    @property
    def is_empty(self) -> bool:
        """Check if the schema has no fields (whole-value mode)."""
        return not self.fields

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Optional[FieldDescriptor]:
        """Get a field descriptor by name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self.fields)


class SchemaBuilder:
    """Builder for explicit field tables.

    Example:
        >>> schema = (
        ...     SchemaBuilder(Entry)
        ...     .add_field("name", str)
        ...     .add_field("tags", List[str])
        ...     .build()
        ... )
    """

    def __init__(self, shape: Any):
        self._shape = shape
        self._fields: List[FieldDescriptor] = []

    def add_field(
        self,
        name: str,
        declared_type: Any,
        getter: Optional[Callable[[Any], Any]] = None,
        setter: Optional[Callable[[Any, Any], None]] = None,
    ) -> "SchemaBuilder":
        """Append a field.

        Args:
            name: Field name, used for diagnostics and default accessors.
            declared_type: The field's declared type.
            getter: Reads the field from a value. Defaults to attribute access.
            setter: Assigns the field on a value. Defaults to attribute assignment.

        Raises:
            UnsupportedTypeError: If the declared type has no wire mapping.
        """
        if any(f.name == name for f in self._fields):
            raise SerializationError(f"Field '{name}' is already defined")
        try:
            category = resolve(declared_type)
        except UnsupportedTypeError as e:
            raise UnsupportedTypeError(
                e.type_name,
                f"Field '{name}' of '{type_name(self._shape)}': {e}",
            ) from e
        self._fields.append(
            FieldDescriptor(
                name=name,
                category=category,
                getter=getter or operator.attrgetter(name),
                setter=setter or _attribute_setter(name),
                index=len(self._fields),
            )
        )
        return self

    def build(self) -> Schema:
        """Build the schema.

        With no fields added, the shape itself must be serializable.
        """
        if self._fields:
            return Schema(self._shape, tuple(self._fields))
        return Schema(self._shape, (), resolve(self._shape))


def _is_marked(hint: Any) -> bool:
    if get_origin(hint) is not Annotated:
        return False
    return any(m is DataMember or isinstance(m, DataMember) for m in get_args(hint)[1:])


def _marked_fields(shape: type) -> List[Tuple[str, Any]]:
    try:
        hints = get_type_hints(shape, include_extras=True)
    except (NameError, TypeError) as e:
        raise UnsupportedTypeError(
            type_name(shape), f"Cannot resolve annotations of '{type_name(shape)}': {e}", e
        )

    dataclass_fields = {}
    if dataclasses.is_dataclass(shape):
        dataclass_fields = {f.name: f for f in dataclasses.fields(shape)}

    marked = []
    for name, hint in hints.items():
        dc_field = dataclass_fields.get(name)
        if _is_marked(hint) or (dc_field is not None and dc_field.metadata.get(DATA_MEMBER_KEY)):
            marked.append((name, strip_annotated(hint)))
    return marked


def build_schema_uncached(shape: Any) -> Schema:
    """Build a schema by inspecting a shape's marked fields.

    A shape that is itself a supported type (a scalar, ``str``, an image,
    or a collection of those) is always encoded whole. Otherwise its
    marked fields are collected in declaration order, base classes first.

    Raises:
        UnsupportedTypeError: If a marked field has no wire mapping, or if
            the shape has no marked fields and is not itself supported.
    """
    try:
        return Schema(shape, (), resolve(shape))
    except UnsupportedTypeError:
        if not isinstance(shape, type):
            raise

    builder = SchemaBuilder(shape)
    for name, declared_type in _marked_fields(shape):
        builder.add_field(name, declared_type)
    return builder.build()


class SchemaService:
    """Cache of schemas keyed by shape.

    Schemas are immutable, so one instance can be shared by any number of
    serializers and threads.
    """

    def __init__(self):
        self._schemas: Dict[Any, Schema] = {}
        self._lock = threading.Lock()

    def register(self, schema: Schema) -> None:
        """Register an explicitly built schema for its shape."""
        with self._lock:
            self._schemas[schema.shape] = schema

    def get(self, shape: Any) -> Optional[Schema]:
        """Get the cached schema for a shape, if any."""
        return self._schemas.get(shape)

    def get_or_build(self, shape: Any) -> Schema:
        """Get the schema for a shape, building and caching it on first use."""
        schema = self._schemas.get(shape)
        if schema is not None:
            return schema

        with self._lock:
            schema = self._schemas.get(shape)
            if schema is None:
                schema = build_schema_uncached(shape)
                self._schemas[shape] = schema
                _logger.debug(
                    "Built schema for %s: %s",
                    type_name(shape),
                    ", ".join(f"{f.name}:{f.category}" for f in schema.fields)
                    or f"whole value {schema.value_category}",
                )
        return schema

    def has_schema(self, shape: Any) -> bool:
        return shape in self._schemas

    def all_schemas(self) -> List[Schema]:
        """Get all cached schemas."""
        return list(self._schemas.values())

    def clear(self) -> None:
        with self._lock:
            self._schemas.clear()


_default_schema_service = SchemaService()


def default_schema_service() -> SchemaService:
    """Get the process-wide schema cache."""
    return _default_schema_service


def build_schema(shape: Any) -> Schema:
    """Get the schema for a shape from the process-wide cache."""
    return _default_schema_service.get_or_build(shape)

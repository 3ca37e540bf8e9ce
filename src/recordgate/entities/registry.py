"""Registry mapping entity names to their models and cached descriptors."""

from typing import Any, Dict, Iterable, List, Optional, Type

from recordgate.access.errors import UnknownEntityError
from recordgate.database.introspection import SchemaSnapshot
from recordgate.entities.descriptor import EntityBinding, EntityDescriptor, describe_entity
from recordgate.utils.logging import get_logger

logger = get_logger(__name__)


class EntityRegistry:
    """
    Entity types are registered once at startup. Descriptors are derived on
    first use and reused until the schema snapshot is refreshed.
    """

    def __init__(self, schema: SchemaSnapshot):
        self.schema = schema
        self._bindings: Dict[str, EntityBinding] = {}
        self._descriptors: Dict[str, EntityDescriptor] = {}

    def register(
        self,
        name: str,
        model: Type[Any],
        translation_model: Optional[Type[Any]] = None,
        owner_managed: bool = True,
        relations: Iterable[str] = (),
    ) -> EntityBinding:
        binding = EntityBinding(
            name=name,
            model=model,
            translation_model=translation_model,
            owner_managed=owner_managed,
            relations=tuple(relations),
        )
        self._bindings[name] = binding
        self._descriptors.pop(name, None)
        logger.debug(f"Registered entity {name} -> {model.__name__}")
        return binding

    def binding(self, name: str) -> EntityBinding:
        try:
            return self._bindings[name]
        except KeyError:
            raise UnknownEntityError(name) from None

    def descriptor(self, name: str) -> EntityDescriptor:
        cached = self._descriptors.get(name)
        if cached is not None:
            return cached
        descriptor = describe_entity(self.binding(name), self.schema)
        self._descriptors[name] = descriptor
        return descriptor

    def refresh_schema(self) -> None:
        """Re-read the schema snapshot and drop every cached descriptor."""
        self.schema.refresh()
        self._descriptors.clear()

    def names(self) -> List[str]:
        return sorted(self._bindings)

    def __contains__(self, name: object) -> bool:
        return name in self._bindings

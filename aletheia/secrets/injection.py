"""Populate annotated attributes of application objects with secrets."""

import dataclasses
import functools
import inspect
from dataclasses import dataclass
from typing import (
    Annotated,
    Any,
    Callable,
    ClassVar,
    Final,
    NamedTuple,
    Optional,
    get_args,
    get_origin,
)

from aletheia.secrets.exceptions import (
    NullTargetError,
    SecretInjectionError,
    SecretNotFoundError,
)
from aletheia.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Secret:
    """
    Declares that an attribute is filled from a secret.

    Usage:
        class DatabaseSettings:
            password: Annotated[str, Secret("DB_PASSWORD")]
            pool_name: Annotated[str, Secret("DB_POOL", required=False, default="main")]
    """

    key: str
    required: bool = True
    default: str = ""


class SecretField(NamedTuple):
    """One attribute declaration carrying a Secret."""

    owner: type
    name: str
    secret: Secret

    @property
    def qualified_name(self) -> str:
        return f"{self.owner.__name__}.{self.name}"


def _parse_annotation(annotation: Any) -> tuple[Optional[Secret], bool]:
    """
    Find the Secret in an annotation.

    Returns:
        (secret or None, whether the attribute may be written)
    """
    secret = None
    writable = True

    while True:
        origin = get_origin(annotation)
        if origin is Annotated:
            if secret is None:
                secret = next(
                    (m for m in annotation.__metadata__ if isinstance(m, Secret)), None
                )
            annotation = annotation.__origin__
        elif origin in (ClassVar, Final) or annotation is ClassVar or annotation is Final:
            writable = False
            args = get_args(annotation)
            if not args:
                break
            annotation = args[0]
        else:
            break

    return secret, writable


def _own_annotations(cls: type) -> dict[str, Any]:
    """Annotations declared directly on ``cls``, with string annotations evaluated."""
    try:
        return inspect.get_annotations(cls, eval_str=True)
    except (NameError, AttributeError, SyntaxError, TypeError) as e:
        logger.warning(
            f"Cannot evaluate string annotations of {cls.__name__} ({e}); "
            f"only its non-string annotations are checked for secrets"
        )

    return {
        name: annotation
        for name, annotation in inspect.get_annotations(cls).items()
        if not isinstance(annotation, str)
    }


def _is_frozen_dataclass(cls: type) -> bool:
    params = cls.__dict__.get("__dataclass_params__")
    return dataclasses.is_dataclass(cls) and params is not None and params.frozen


@functools.lru_cache(maxsize=None)
def secret_fields(cls: type) -> tuple[SecretField, ...]:
    """
    List every injectable Secret declaration of ``cls`` and its bases.

    Base classes come first, so when a subclass redeclares an attribute
    its declaration is applied last. ClassVar and Final declarations, and
    attributes of frozen dataclasses, are left out.
    """
    fields = []
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        frozen = _is_frozen_dataclass(klass)
        for name, annotation in _own_annotations(klass).items():
            secret, writable = _parse_annotation(annotation)
            if secret is None:
                continue
            if not writable or frozen:
                logger.debug(f"Skipping immutable field: {klass.__name__}.{name}")
                continue
            fields.append(SecretField(klass, name, secret))
    return tuple(fields)


class SecretInjector:
    """
    Writes resolved secrets into Secret-annotated attributes.

    Injection is not transactional: when a required secret is missing the
    error propagates and attributes written so far keep their values.

    Usage:
        injector = SecretInjector(resolver.get_secret)
        settings = DatabaseSettings()
        injector.inject(settings)
    """

    def __init__(self, resolve: Callable[[str], str]):
        """
        Args:
            resolve: Callable returning the secret for a key or raising
                SecretNotFoundError
        """
        self._resolve = resolve

    def inject(self, target: Any) -> None:
        """
        Populate every Secret-annotated attribute of ``target``.

        Raises:
            NullTargetError: If target is None
            SecretNotFoundError: If a required secret without default is missing
            SecretInjectionError: If an attribute rejects the write
            AletheiaError: Any other resolution failure, unchanged
        """
        if target is None:
            raise NullTargetError("Target object cannot be None for injection")

        for field in secret_fields(type(target)):
            value = self._value_for(field.secret)
            try:
                setattr(target, field.name, value)
            except (AttributeError, TypeError) as e:
                raise SecretInjectionError(field.qualified_name) from e
            logger.debug(f"Injected secret '{field.secret.key}' into {field.qualified_name}")

    def _value_for(self, secret: Secret) -> str:
        try:
            value = self._resolve(secret.key)
        except SecretNotFoundError:
            if secret.required and not secret.default:
                raise
            return secret.default

        if value:
            return value
        if secret.required and not secret.default:
            raise SecretNotFoundError(secret.key)
        return secret.default

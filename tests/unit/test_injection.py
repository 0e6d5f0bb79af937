"""Tests for attribute injection."""

from dataclasses import dataclass
from typing import Annotated, ClassVar, Final

import pytest

from aletheia.secrets.cache import CachedSecretBackend
from aletheia.secrets.chain import SecretChain
from aletheia.secrets.exceptions import (
    NullTargetError,
    SecretInjectionError,
    SecretNotFoundError,
)
from aletheia.secrets.injection import Secret, SecretInjector, secret_fields


class DatabaseSettings:
    host = "localhost"
    password: Annotated[str, Secret("DB_PASSWORD")]
    pool: Annotated[str, Secret("DB_POOL", required=False, default="main")]


class ServiceSettings(DatabaseSettings):
    api_key: Annotated[str, Secret("API_KEY")]


class BaseToken:
    token: Annotated[str, Secret("BASE_TOKEN")]


class DerivedToken(BaseToken):
    token: Annotated[str, Secret("DERIVED_TOKEN")]


class Immutable:
    shared: ClassVar[Annotated[str, Secret("SHARED")]] = "class-level"
    pinned: Final[Annotated[str, Secret("PINNED")]] = "pinned"
    normal: Annotated[str, Secret("NORMAL")]


@dataclass(frozen=True)
class FrozenSettings:
    password: Annotated[str, Secret("DB_PASSWORD")] = ""


@dataclass
class DataclassSettings:
    password: Annotated[str, Secret("DB_PASSWORD")] = ""
    region: Annotated[str, Secret("REGION", required=False, default="us-east-1")] = ""


class ReadOnly:
    token: Annotated[str, Secret("TOKEN")]

    @property
    def token(self):
        return "fixed"


class Slotted:
    __slots__ = ("other",)
    token: Annotated[str, Secret("TOKEN")]


class Private:
    __api_key: Annotated[str, Secret("API_KEY")]

    def reveal(self):
        return self.__api_key


class Ordered:
    first: Annotated[str, Secret("FIRST")]
    second: Annotated[str, Secret("SECOND")]


class StringAnnotated:
    token: "Annotated[str, Secret('TOKEN')]"


class OptionalWithoutDefault:
    extra: Annotated[str, Secret("EXTRA", required=False)]


class PartlyResolvable:
    client: "UndefinedClient"  # noqa: F821
    token: Annotated[str, Secret("TOKEN")]


@pytest.fixture
def injector_for(make_backend):
    """Build an injector over a single fake backend."""

    def build(secrets):
        backend = make_backend(secrets)
        chain = SecretChain([CachedSecretBackend(backend, 3600)])
        return SecretInjector(chain.resolve), backend

    return build


class TestSecretInjector:
    """Tests for SecretInjector.inject."""

    def test_injects_required_and_optional(self, injector_for):
        """Found secrets are written, missing optional ones get the default."""
        # Arrange
        injector, _ = injector_for({"DB_PASSWORD": "s3cret"})
        settings = DatabaseSettings()

        # Act
        injector.inject(settings)

        # Assert
        assert settings.password == "s3cret"
        assert settings.pool == "main"
        assert settings.host == "localhost"

    def test_optional_default_exact(self, injector_for):
        """An optional missing secret should be set to exactly its default."""
        # Arrange
        injector, _ = injector_for({})

        class Target:
            x: Annotated[str, Secret("X", required=False, default="d")]

        target = Target()

        # Act
        injector.inject(target)

        # Assert
        assert target.x == "d"

    def test_optional_without_default_gets_empty_string(self, injector_for):
        """Optional secrets with no default become an empty string."""
        # Arrange
        injector, _ = injector_for({})
        target = OptionalWithoutDefault()

        # Act
        injector.inject(target)

        # Assert
        assert target.extra == ""

    def test_required_missing_raises(self, injector_for):
        """A required secret without default must not be left unset silently."""
        # Arrange
        injector, _ = injector_for({})
        settings = DatabaseSettings()

        # Act & Assert
        with pytest.raises(SecretNotFoundError) as exc_info:
            injector.inject(settings)

        assert exc_info.value.key == "DB_PASSWORD"
        assert not hasattr(settings, "password")

    def test_required_with_default_uses_default(self, injector_for):
        """A required secret with a default falls back to it."""
        # Arrange
        injector, _ = injector_for({})

        class Target:
            url: Annotated[str, Secret("URL", required=True, default="http://fallback")]

        target = Target()

        # Act
        injector.inject(target)

        # Assert
        assert target.url == "http://fallback"

    def test_partial_injection_is_kept(self, injector_for):
        """Fields written before a failure keep their values."""
        # Arrange
        injector, _ = injector_for({"FIRST": "one"})
        target = Ordered()

        # Act & Assert
        with pytest.raises(SecretNotFoundError):
            injector.inject(target)

        assert target.first == "one"
        assert not hasattr(target, "second")

    def test_walks_inherited_fields(self, injector_for):
        """Fields from base and derived classes are both populated."""
        # Arrange
        injector, _ = injector_for({"DB_PASSWORD": "db", "API_KEY": "key"})
        settings = ServiceSettings()

        # Act
        injector.inject(settings)

        # Assert
        assert settings.password == "db"
        assert settings.api_key == "key"

    def test_redeclared_field_resolved_at_each_level(self, injector_for):
        """Each redeclaration is resolved; the subclass declaration wins."""
        # Arrange
        injector, backend = injector_for({"BASE_TOKEN": "base", "DERIVED_TOKEN": "derived"})
        target = DerivedToken()

        # Act
        injector.inject(target)

        # Assert
        assert sorted(backend.calls) == ["BASE_TOKEN", "DERIVED_TOKEN"]
        assert target.token == "derived"

    def test_skips_classvar_and_final(self, injector_for):
        """ClassVar and Final declarations are never written."""
        # Arrange
        injector, backend = injector_for({"SHARED": "x", "PINNED": "y", "NORMAL": "z"})
        target = Immutable()

        # Act
        injector.inject(target)

        # Assert
        assert backend.calls == ["NORMAL"]
        assert Immutable.shared == "class-level"
        assert target.pinned == "pinned"
        assert target.normal == "z"

    def test_skips_frozen_dataclass(self, injector_for):
        """Attributes of frozen dataclasses are immutable and skipped."""
        # Arrange
        injector, backend = injector_for({"DB_PASSWORD": "s3cret"})
        settings = FrozenSettings()

        # Act
        injector.inject(settings)

        # Assert
        assert settings.password == ""
        assert backend.calls == []

    def test_injects_dataclass(self, injector_for):
        """Regular dataclasses are injected like any other class."""
        # Arrange
        injector, _ = injector_for({"DB_PASSWORD": "s3cret"})
        settings = DataclassSettings()

        # Act
        injector.inject(settings)

        # Assert
        assert settings.password == "s3cret"
        assert settings.region == "us-east-1"

    def test_private_attributes_are_injected(self, injector_for):
        """Name-mangled attributes are written under their mangled name."""
        # Arrange
        injector, _ = injector_for({"API_KEY": "hidden"})
        target = Private()

        # Act
        injector.inject(target)

        # Assert
        assert target.reveal() == "hidden"

    def test_string_annotations_are_evaluated(self, injector_for):
        """Annotations written as strings are still discovered."""
        # Arrange
        injector, _ = injector_for({"TOKEN": "tok"})
        target = StringAnnotated()

        # Act
        injector.inject(target)

        # Assert
        assert target.token == "tok"

    def test_unresolvable_annotation_keeps_evaluated_fields(self, injector_for, caplog):
        """A string annotation naming an unknown type does not hide the other fields."""
        # Arrange
        injector, _ = injector_for({"TOKEN": "tok"})
        target = PartlyResolvable()

        # Act
        injector.inject(target)

        # Assert
        assert target.token == "tok"
        assert not hasattr(target, "client")
        assert "Cannot evaluate string annotations of PartlyResolvable" in caplog.text

    @pytest.mark.parametrize("target_cls", [ReadOnly, Slotted])
    def test_rejected_write_raises_injection_error(self, injector_for, target_cls):
        """Read-only properties and missing slots raise SecretInjectionError."""
        # Arrange
        injector, _ = injector_for({"TOKEN": "tok"})
        target = target_cls()

        # Act & Assert
        with pytest.raises(SecretInjectionError) as exc_info:
            injector.inject(target)

        assert exc_info.value.field_name == f"{target_cls.__name__}.token"
        assert exc_info.value.__cause__ is not None

    def test_none_target_raises(self, injector_for):
        """Injection into None is rejected."""
        # Arrange
        injector, backend = injector_for({})

        # Act & Assert
        with pytest.raises(NullTargetError):
            injector.inject(None)

        assert backend.calls == []

    def test_object_without_secrets_is_untouched(self, injector_for):
        """Plain objects pass through without lookups."""
        # Arrange
        injector, backend = injector_for({})

        class Plain:
            name: str = "x"

        # Act
        injector.inject(Plain())

        # Assert
        assert backend.calls == []


class TestSecretFields:
    """Tests for secret field discovery."""

    def test_lists_fields_base_first(self):
        """Base class declarations come before subclass ones."""
        # Act
        fields = secret_fields(ServiceSettings)

        # Assert
        assert [f.qualified_name for f in fields] == [
            "DatabaseSettings.password",
            "DatabaseSettings.pool",
            "ServiceSettings.api_key",
        ]
        assert fields[1].secret == Secret("DB_POOL", required=False, default="main")

    def test_secret_descriptor_is_immutable(self):
        """Secret descriptors cannot be modified after declaration."""
        secret = Secret("KEY")

        with pytest.raises(AttributeError):
            secret.key = "OTHER"

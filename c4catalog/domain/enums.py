"""Enumerations persisted as their lowerCamel string names."""
from __future__ import annotations

from enum import Enum
from typing import Type, TypeVar

from c4catalog.domain.errors import ValidationError

E = TypeVar("E", bound=Enum)


class ServiceType(str, Enum):
    SERVICE = "service"
    WEBSITE = "website"
    LIBRARY = "library"


class ServiceLifecycle(str, Enum):
    EXPERIMENTAL = "experimental"
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    DEPRECATED = "deprecated"


class DiagramType(str, Enum):
    CONTEXT = "context"
    CONTAINER = "container"
    COMPONENT = "component"
    CODE = "code"


class ElementType(str, Enum):
    PERSON = "person"
    SYSTEM = "system"
    EXTERNAL_SYSTEM = "externalSystem"
    CONTAINER = "container"
    COMPONENT = "component"
    CODE_ELEMENT = "codeElement"


class StageType(str, Enum):
    BUILD = "build"
    TEST = "test"
    DOCKER_BUILD = "dockerBuild"
    DOCKER_DEPLOY = "dockerDeploy"
    CUSTOM = "custom"


class ExecutionStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"
    PENDING = "pending"


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ProjectType(str, Enum):
    WEB_APPLICATION = "webApplication"
    MOBILE_APPLICATION = "mobileApplication"
    MICROSERVICES = "microservices"
    DATA_PLATFORM = "dataPlatform"
    ML_PLATFORM = "mlPlatform"
    INFRASTRUCTURE = "infrastructure"
    LIBRARY = "library"
    DOCUMENTATION = "documentation"


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    ACTIVE = "active"
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    MAINTENANCE = "maintenance"
    DEPRECATED = "deprecated"
    ARCHIVED = "archived"


class ProjectRole(str, Enum):
    OWNER = "owner"
    MAINTAINER = "maintainer"
    DEVELOPER = "developer"
    CONTRIBUTOR = "contributor"
    VIEWER = "viewer"


# Statuses an execution may be cancelled from
CANCELLABLE_STATUSES = frozenset({ExecutionStatus.QUEUED, ExecutionStatus.RUNNING})


def parse_enum(enum_cls: Type[E], value: str | None, label: str | None = None) -> E:
    """
    Strictly parse a user-supplied string into an enum member.

    Matching is case-insensitive against both the member name
    (``DOCKER_BUILD``, ``dockerbuild``) and the persisted value
    (``dockerBuild``). Unknown or empty values raise ValidationError
    instead of falling back to a default.
    """
    label = label or enum_cls.__name__
    if value is None or not str(value).strip():
        raise ValidationError(f"Invalid {label}: value is required")

    needle = str(value).strip().lower()
    for member in enum_cls:
        if needle in (member.value.lower(), member.name.lower(), member.name.replace("_", "").lower()):
            return member
    raise ValidationError(f"Invalid {label}: {value}")

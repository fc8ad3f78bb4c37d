"""Build-descriptor detection."""

from pathlib import Path

from appdeploy.constants import COMPOSE_FILENAMES, DOCKERFILE_NAME
from appdeploy.exceptions import ConfigError
from appdeploy.models.results import BuildDescriptor, DescriptorKind


def detect_descriptor(repo_dir: Path) -> BuildDescriptor:
    """
    Pick the build descriptor of a working copy.

    A compose file wins over a Dockerfile when both exist: the compose
    stack usually builds that Dockerfile itself.

    Raises:
        ConfigError: If neither kind is present
    """
    repo_dir = Path(repo_dir)

    for filename in COMPOSE_FILENAMES:
        if (repo_dir / filename).is_file():
            return BuildDescriptor(DescriptorKind.COMPOSE, filename)

    if (repo_dir / DOCKERFILE_NAME).is_file():
        return BuildDescriptor(DescriptorKind.DOCKERFILE, DOCKERFILE_NAME)

    raise ConfigError(
        "No build descriptor found",
        context=f"Expected {DOCKERFILE_NAME} or one of {', '.join(COMPOSE_FILENAMES)} in {repo_dir}",
    )

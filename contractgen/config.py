import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from contractgen.exceptions import ConfigurationError

DEFAULT_FILENAMES = ['contractgen.yaml', 'contractgen.yml']


class DocumentConfig(BaseModel):
    """Represents a single document to be processed."""

    source: str = Field(..., description='Path or URL to the OpenAPI document.')

    output: str = Field(..., description='Output directory for the generated code.')

    models_folder: str = Field(
        'models', description='Folder (below output) for model declarations.'
    )

    controllers_folder: str = Field(
        'controllers', description='Folder (below output) for controller interfaces.'
    )

    routes_folder: str = Field(
        'routes', description='Folder (below output) for route factories.'
    )

    middleware_config: str | None = Field(
        None,
        description='Optional middleware policy: a YAML/JSON rule file or a Python module.',
    )

    generate_controllers: bool = Field(
        True, description='Whether to generate controller interfaces.'
    )

    generate_routes: bool = Field(True, description='Whether to generate routes.')

    include_all_schemas: bool = Field(
        False,
        description='Declare every components.schemas entry, not only the ones operations use.',
    )


class CodegenConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='CONTRACTGEN_')

    documents: list[DocumentConfig] = Field(
        ..., description='List of OpenAPI documents to process.'
    )


def load_yaml(path: str | Path) -> dict:
    try:
        return yaml.safe_load(Path(path).read_text(encoding='utf-8')) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f'Cannot read config: {e}', str(path))


def _validate(data: dict, path: str | Path) -> CodegenConfig:
    try:
        return CodegenConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f'Invalid configuration: {e}', str(path))


def get_config(path: str | None = None) -> CodegenConfig:
    """Load configuration from a file.

    Looks at the explicit path, then the default file names in the working
    directory, then ``[tool.contractgen]`` in ``pyproject.toml``.

    Raises:
        ConfigurationError: If no configuration is found or it is invalid.
    """
    if path:
        if not Path(path).exists():
            raise ConfigurationError('Config file not found', path)
        return _validate(load_yaml(path), path)

    cwd = os.getcwd()

    for filename in DEFAULT_FILENAMES:
        candidate = Path(cwd) / filename
        if candidate.exists():
            return _validate(load_yaml(candidate), candidate)

    pyproject_path = Path(cwd) / 'pyproject.toml'

    if pyproject_path.exists():
        import tomllib

        pyproject = tomllib.loads(pyproject_path.read_text())
        tools = pyproject.get('tool', {})

        if 'contractgen' in tools:
            return _validate(tools['contractgen'], pyproject_path)

    raise ConfigurationError(
        f"No configuration found: create {' or '.join(DEFAULT_FILENAMES)} "
        'or add [tool.contractgen] to pyproject.toml'
    )

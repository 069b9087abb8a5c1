"""Generator options and how they are layered.

Options come from two places: the application's own ``swagger`` config block
and explicit caller overrides (CLI flags, keyword arguments). An override that
is not ``None`` wins over the app config; anything left unset falls back to the
defaults below.
"""

from pydantic import BaseModel, ConfigDict, Field

# Method names whose root response is a model instance (or list of them) that
# may embed related models.
DEFAULT_RETRIEVAL_PATTERNS = [r"^find(One|ById)?$", r"^__get__", r"^__findById__"]

# Method names that create a new instance from the request body.
DEFAULT_CREATION_PATTERNS = [r"^create$", r"^__create__"]


class GeneratorOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    generate_operation_scoped_models: bool = Field(False, alias="generateOperationScopedModels")
    generate_relation_properties: bool = Field(False, alias="generateRelationProperties")
    retrieval_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RETRIEVAL_PATTERNS), alias="retrievalPatterns"
    )
    creation_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CREATION_PATTERNS), alias="creationPatterns"
    )
    base_path: str | None = Field(None, alias="basePath")
    host: str | None = None
    protocol: str | None = None


# App-level swagger config keys that configure the generator and are not
# copied into the document.
GENERATOR_ONLY_KEYS = {
    "generateOperationScopedModels",
    "generate_operation_scoped_models",
    "generateRelationProperties",
    "generate_relation_properties",
    "retrievalPatterns",
    "retrieval_patterns",
    "creationPatterns",
    "creation_patterns",
    "base_path",
    "protocol",
}


def resolve_options(app_config: dict | None = None, **overrides) -> GeneratorOptions:
    """Merge app-level swagger config with explicit overrides."""
    data = {}
    for field_name, field in GeneratorOptions.model_fields.items():
        for key in (field_name, field.alias):
            if app_config and key and key in app_config:
                data[field_name] = app_config[key]
    for key, value in overrides.items():
        if key not in GeneratorOptions.model_fields:
            raise TypeError(f"unknown generator option: {key}")
        if value is not None:
            data[key] = value
    return GeneratorOptions(**data)

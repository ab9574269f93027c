"""Application descriptor model - describes an application's metadata and frontend wiring."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

DESCRIPTOR_FILE = "application.json"
SUPPORTED_CONFIG_VERSION = 1


class _DescriptorModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class ApplicationVersion(_DescriptorModel):
    major: int = Field(..., ge=0)
    minor: int = Field(..., ge=0)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


class CreditEntry(_DescriptorModel):
    name: str
    site: str = ""


class ApplicationCredits(_DescriptorModel):
    authors: List[CreditEntry] = Field(default_factory=list)
    contributors: List[CreditEntry] = Field(default_factory=list)
    translators: List[CreditEntry] = Field(default_factory=list)
    other: List[CreditEntry] = Field(default_factory=list)


class EmbeddedFrontend(_DescriptorModel):
    entry_point: str = Field(..., alias="entryPoint", description="UI bundle entry, relative to the application")


class ExternalFrontend(_DescriptorModel):
    url: str = Field(..., min_length=1)


class ApplicationDescriptor(_DescriptorModel):
    """Application descriptor loaded from application.json.

    An application wires its UI in at most one way: an embedded bundle
    (``frontend``) or an externally hosted one (``externalFrontend``).
    Declaring both is rejected rather than resolved by precedence.
    """

    id: str = Field(
        ...,
        pattern=r"^[a-z0-9]+(-[a-z0-9]+)*$",
        description="Unique application identifier (kebab-case, e.g. 'uk-example-app')",
    )
    display_name: str = Field(..., alias="displayName")
    description: str = Field(default="")
    version: ApplicationVersion
    credits: ApplicationCredits = Field(default_factory=ApplicationCredits)
    config_version: int = Field(..., alias="configVersion")
    frontend: Optional[EmbeddedFrontend] = None
    external_frontend: Optional[ExternalFrontend] = Field(default=None, alias="externalFrontend")
    entry_point: str = Field(
        default="backend:register",
        alias="entryPoint",
        pattern=r"^[A-Za-z_][A-Za-z0-9_]*:[A-Za-z_][A-Za-z0-9_]*$",
        description="Python module:function path relative to the application directory",
    )

    @model_validator(mode="after")
    def _check_wiring(self) -> "ApplicationDescriptor":
        if self.config_version != SUPPORTED_CONFIG_VERSION:
            raise ValueError(
                f"Unsupported configVersion {self.config_version}, expected {SUPPORTED_CONFIG_VERSION}"
            )
        if self.frontend is not None and self.external_frontend is not None:
            raise ValueError("An application may declare 'frontend' or 'externalFrontend', not both")
        return self

    @property
    def has_embedded_frontend(self) -> bool:
        return self.frontend is not None

    @property
    def external_url(self) -> Optional[str]:
        return self.external_frontend.url if self.external_frontend else None

    @property
    def entry_module(self) -> str:
        return self.entry_point.split(":")[0]

    @property
    def entry_function(self) -> str:
        return self.entry_point.split(":")[1]

"""Landing/program configuration models.

The same models decode the JSON config file and the tree rebuilt from the
parameter store.
"""

from pydantic import BaseModel, Field


class Program(BaseModel):
    """An organization program users can be onboarded into."""

    organization_name: str
    organization_id: int
    user_type_id: int
    caregiver_user_type_id: int = 0
    pro_ids: list[str] = Field(default_factory=list)


class LandingConfig(BaseModel):
    """OAuth credentials and programs for one landing page."""

    client_id: str = ""
    username: str = ""
    password: str = ""
    programs: dict[str, Program] = Field(
        default_factory=dict,
        description="Programs keyed by organization name",
    )


class CommonConfig(BaseModel):
    """Settings shared by every landing."""

    public_base_uri: str = ""
    redirects: dict[str, str] = Field(default_factory=dict)


class AppConfig(BaseModel):
    """Complete landing configuration."""

    common: CommonConfig = Field(default_factory=CommonConfig)
    landing: dict[str, LandingConfig] = Field(default_factory=dict)

    def program_for(self, landing: str, program: str) -> Program:
        """Look up a program. Raises KeyError when the landing or program is unknown."""
        return self.landing[landing].programs[program]

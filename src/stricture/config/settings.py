"""Application settings."""

from pydantic import BaseModel, Field

from stricture.filters import CheckFilter, build_filters


class Settings(BaseModel):
  """Application configuration."""

  checks: list[str] = Field(default_factory=list)
  ignore_paths: list[str] = Field(default_factory=list)
  ignore_namespaces: list[str] = Field(default_factory=list)
  history: bool = False
  format: str = "terminal"

  def build_filters(self) -> list[CheckFilter]:
    """Compile the ignore patterns into check filters."""
    return build_filters(self.ignore_paths, self.ignore_namespaces)

from pydantic import BaseModel, Field


class BuildError(BaseModel):
    file: str
    error: str


class BuildReport(BaseModel):
    output_dir: str = ""
    pages: int = 0
    static_files: int = 0
    errors: list[BuildError] = Field(default_factory=list)
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.errors


class ReproducibilityReport(BaseModel):
    """Outcome of rendering the same content twice and comparing bytes."""

    files: int = 0
    mismatched: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)

    @property
    def reproducible(self) -> bool:
        return not self.mismatched and not self.missing

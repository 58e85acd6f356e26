import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

# Coverage entry for a line outside the patch. Serialized as JSON null, the
# same value readers use for lines that carry no coverage.
IGNORED_LINE: int | None = None


class LineCounts(BaseModel):
    covered: int = 0
    missed: int = 0
    total: int = 0

    @classmethod
    def from_coverage(cls, coverage: list[int | None]) -> "LineCounts":
        covered = sum(1 for hits in coverage if hits is not None and hits > 0)
        missed = sum(1 for hits in coverage if hits == 0)
        return cls(covered=covered, missed=missed, total=covered + missed)

    @property
    def covered_percent(self) -> float:
        return (self.covered / self.total) * 100 if self.total else 0.0

    def __add__(self, other: "LineCounts") -> "LineCounts":
        return LineCounts(
            covered=self.covered + other.covered,
            missed=self.missed + other.missed,
            total=self.total + other.total,
        )


class SourceFile(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
    )

    name: str
    blob_id: str | None = None
    coverage: list[int | None] = Field(default_factory=list)

    @field_validator("coverage", mode="before")
    @classmethod
    def _decode_coverage(cls, value: Any) -> Any:
        # cc-test-reporter writes the array as a JSON-encoded string.
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError as exc:
                raise ValueError(f"coverage is not a JSON array: {exc}") from exc
        return value

    @property
    def line_counts(self) -> LineCounts:
        return LineCounts.from_coverage(self.coverage)

    def encoded_coverage(self) -> str:
        return json.dumps(self.coverage, separators=(",", ":"))

    def to_output(self) -> dict[str, Any]:
        """Render in the layout cc-test-reporter writes, coverage included as a string."""
        counts = self.line_counts
        output: dict[str, Any] = {"name": self.name}
        if self.blob_id is not None:
            output["blob_id"] = self.blob_id
        output["coverage"] = self.encoded_coverage()
        output["line_counts"] = counts.model_dump()
        output["covered_percent"] = counts.covered_percent
        return output


class CoverageReport(BaseModel):
    """Per-line coverage for a set of source files, keyed by path."""

    model_config = ConfigDict(
        extra="ignore",
    )

    source_files: dict[str, SourceFile] = Field(default_factory=dict)

    @field_validator("source_files", mode="before")
    @classmethod
    def _key_source_files(cls, value: Any) -> Any:
        if isinstance(value, list):
            keyed: dict[str, Any] = {}
            for entry in value:
                if not isinstance(entry, dict) or "name" not in entry:
                    raise ValueError("each source file needs a name")
                keyed[entry["name"]] = entry
            return keyed
        if isinstance(value, dict):
            return {
                path: {**entry, "name": path} if isinstance(entry, dict) else entry
                for path, entry in value.items()
            }
        return value

    @field_serializer("source_files")
    def _serialize_source_files(
        self, source_files: dict[str, SourceFile]
    ) -> list[dict[str, Any]]:
        return [source_files[name].to_output() for name in sorted(source_files)]

    @property
    def line_counts(self) -> LineCounts:
        total = LineCounts()
        for source_file in self.source_files.values():
            total = total + source_file.line_counts
        return total

    def to_output(self) -> dict[str, Any]:
        counts = self.line_counts
        return {
            "line_counts": counts.model_dump(),
            "covered_percent": counts.covered_percent,
            "source_files": self.model_dump(mode="json")["source_files"],
        }

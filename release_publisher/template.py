"""Target URL template expansion.

Templates use ``{{ .Field }}`` placeholders, for example::

    https://repo.example.com/{{ .ProjectName }}/{{ .Version }}/{{ .Os }}/{{ .Arch }}

Supported fields: ProjectName, Version, Tag, Os, Arch, Arm, ArtifactName,
ArtifactPath, ArtifactID and ``Env.<NAME>`` for values from the run environment.
Os, Arch and Arm are passed through the replacements map when one is given.
"""

import re
from typing import Dict, Mapping, Optional

from .artifact import Artifact
from .context import RunContext
from .exceptions import TemplateError

_PLACEHOLDER_RE = re.compile(r"{{\s*\.([A-Za-z][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)?)\s*}}")


class TemplateRenderer:
    """Expands placeholders using run and artifact metadata."""

    def __init__(self, ctx: RunContext) -> None:
        self._ctx = ctx
        self._fields: Dict[str, str] = {
            "ProjectName": ctx.project_name,
            "Version": ctx.version,
            "Tag": ctx.tag,
        }

    def with_artifact(self, artifact: Artifact, replacements: Optional[Mapping[str, str]] = None) -> "TemplateRenderer":
        """Add the artifact fields, applying ``replacements`` to os/arch/arm values."""
        replacements = replacements or {}
        self._fields.update(
            {
                "Os": replacements.get(artifact.os, artifact.os),
                "Arch": replacements.get(artifact.arch, artifact.arch),
                "Arm": replacements.get(artifact.arm, artifact.arm),
                "ArtifactName": artifact.name,
                "ArtifactPath": artifact.path,
                "ArtifactID": artifact.id or "",
            }
        )
        return self

    def apply(self, template: str) -> str:
        """
        Expand every placeholder in ``template``.

        Raises:
            TemplateError: If a placeholder is unknown or malformed
        """

        def _replace(match: "re.Match[str]") -> str:
            return self._lookup(match.group(1))

        # only the template text itself is checked; expanded values may contain braces
        unmatched = _PLACEHOLDER_RE.sub("", template)
        if "{{" in unmatched or "}}" in unmatched:
            raise TemplateError(f"template: malformed placeholder in '{template}'")
        return _PLACEHOLDER_RE.sub(_replace, template)

    def _lookup(self, key: str) -> str:
        if key.startswith("Env."):
            name = key[len("Env.") :]
            value = self._ctx.env.get(name)
            if value is None:
                raise TemplateError(f"template: environment variable '{name}' is not set")
            return value
        if key not in self._fields:
            raise TemplateError(f"template: unknown field '.{key}'")
        return self._fields[key]

"""CLI configuration and project detection.

Combines the global :class:`~unity_yaml_editor.config.EditorConfig` with
command-line overrides (``--project``, ``--format``).
"""

from pathlib import Path
from typing import Optional, Union

from unity_yaml_editor.config import EditorConfig, get_config
from unity_yaml_editor.core.guid_resolver import GuidResolver, find_project_root
from unity_yaml_editor.core.pagination import normalize_page_size


class CLIContext:
    """CLI execution context with resolved configuration.

    Holds the effective configuration for a CLI command, including
    any overrides from command-line options.
    """

    def __init__(
        self,
        project: Optional[str] = None,
        output_format: Optional[str] = None,
        editor_config: Optional[EditorConfig] = None,
    ):
        """Initialize CLI context.

        Args:
            project: Explicit Unity project root from --project.
            output_format: Explicit --format value.
            editor_config: Optional config (uses global if not provided).
        """
        self._project_override = project
        self._format_override = output_format
        self._config = editor_config or get_config()
        self._resolved_project_root: Optional[Path] = None

    @property
    def config(self) -> EditorConfig:
        return self._config

    @property
    def output_format(self) -> str:
        return self._format_override or self._config.output_format

    def project_root(self, near: Optional[Union[str, Path]] = None) -> Optional[Path]:
        """Get the resolved Unity project root.

        Resolution order:
        1. CLI --project option (highest priority)
        2. EditorConfig.project_root (from env/TOML)
        3. Auto-detected by walking up from ``near`` (or the working directory)
        """
        if self._resolved_project_root is not None:
            return self._resolved_project_root

        if self._project_override:
            self._resolved_project_root = Path(self._project_override).resolve()
        elif self._config.project_root:
            self._resolved_project_root = self._config.project_root.resolve()
        else:
            start = Path(near).resolve().parent if near is not None else None
            detected = find_project_root(start)
            if detected is None:
                return None
            self._resolved_project_root = detected
        return self._resolved_project_root

    def page_size(self, requested: Optional[int]) -> int:
        return normalize_page_size(
            requested,
            default=self._config.default_page_size,
            maximum=self._config.max_page_size,
        )

    def guid_resolver(self, near: Optional[Union[str, Path]] = None) -> Optional[GuidResolver]:
        """A resolver for the project root, or None when no project is found."""
        root = self.project_root(near)
        if root is None:
            return None
        return GuidResolver(
            root,
            cache_path=self._config.guid_cache_path,
            persist=self._config.persist_guid_cache,
        )

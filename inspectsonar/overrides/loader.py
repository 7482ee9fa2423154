"""Locating and reading the rule override document."""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, TYPE_CHECKING

from loguru import logger

from inspectsonar.config.defaults import OVERRIDE_FILE_NAME
from inspectsonar.config.schema import OverridesConfig
from inspectsonar.core.models import CategoryOverride, RuleOverride
from inspectsonar.parsing.parser import ReportParseError, RuleOverrideParser
from inspectsonar.parsing.validator import overrides_validator
from inspectsonar.resources import open_resource

if TYPE_CHECKING:
    from loguru import Logger

BUNDLED = "bundled"


@dataclass(slots=True)
class OverrideSet:
    """Rule and category overrides read from one document."""

    source: str | None = None
    rule_overrides: list[RuleOverride] = field(default_factory=list)
    category_overrides: list[CategoryOverride] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.rule_overrides or self.category_overrides)


def resolve_override_path(config: OverridesConfig | None = None, *, cwd: Path | None = None) -> Path | None:
    """Return the external override file, or ``None`` when the bundled default applies.

    The environment variable named by ``config.env_var`` takes precedence over
    ``config.file_name`` in the working directory.
    """
    cfg = config or OverridesConfig()
    env_value = os.environ.get(cfg.env_var, "").strip()
    candidate = Path(env_value).expanduser() if env_value else Path(cfg.file_name)
    if not candidate.is_absolute():
        candidate = (cwd or Path.cwd()) / candidate
    if candidate.is_file():
        return candidate
    return None


@contextmanager
def _open_overrides(path: Path | None, use_bundled: bool) -> Iterator[tuple[str, IO] | None]:
    if path is not None:
        with open(path, "rb") as f:
            yield str(path), f
        return
    if not use_bundled:
        yield None
        return
    with open_resource(OVERRIDE_FILE_NAME) as f:
        yield BUNDLED, f


def load_overrides(
    path: Path | None = None,
    *,
    config: OverridesConfig | None = None,
    validate: bool = False,
    log: "Logger | None" = None,
) -> OverrideSet:
    """Read overrides from ``path`` or the resolved location.

    Missing documents, failed validation and fatal parse errors are logged and
    yield an empty :class:`OverrideSet`.
    """
    log = log or logger.bind(component="override_loader")
    cfg = config or OverridesConfig()
    if path is not None and not path.is_file():
        log.error("override_file_missing path={}", path)
        return OverrideSet()

    source_path = path or resolve_override_path(cfg)
    try:
        with _open_overrides(source_path, cfg.use_bundled_default) as opened:
            if opened is None:
                log.info("override_file_absent file_name={}", cfg.file_name)
                return OverrideSet()
            source, stream = opened
            if validate and not overrides_validator(log).validate(stream):
                log.error("override_validation_failed source={}", source)
                return OverrideSet()
            parser = RuleOverrideParser(log=log)
            parser.parse(stream)
    except FileNotFoundError as e:
        log.error("override_file_missing source={} error={}", source_path or BUNDLED, e)
        return OverrideSet()
    except (OSError, ValueError, ReportParseError) as e:
        log.error("override_parse_failed source={} error={}", source_path or BUNDLED, e)
        return OverrideSet()

    log.debug(
        "overrides_loaded source={} rule_overrides={} category_overrides={}",
        source,
        len(parser.rule_overrides),
        len(parser.category_overrides),
    )
    return OverrideSet(
        source=source,
        rule_overrides=parser.rule_overrides,
        category_overrides=parser.category_overrides,
    )

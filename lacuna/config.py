"""Process-wide defaults and logging setup.

Initial values come from the environment:

  LACUNA_OUT_OF_DOMAIN   'keep' or 'drop' (complete() policy, default 'keep')
  LACUNA_FILL_DIRECTION  default fill() direction (default 'down')
  LACUNA_SENTINELS       comma-separated sentinels for recode_sentinels()
                         (default '-99'; numeric strings become numbers)
  LACUNA_LOG_LEVEL       level set by configure_logging() (default 'WARNING')

Usage::

    from lacuna.config import options, option_context

    with option_context(out_of_domain="drop"):
        complete(table, ["year", domain("qtr", [1, 2, 3, 4])])
"""
from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass, fields, replace
from typing import Any, Iterator, Tuple

FILL_DIRECTIONS = ('down', 'up', 'downup', 'updown')
OUT_OF_DOMAIN_POLICIES = ('keep', 'drop')
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def validate_fill_direction(direction: str) -> None:
    if direction not in FILL_DIRECTIONS:
        raise ValueError(
            f"fill direction must be one of {FILL_DIRECTIONS}, got {direction!r}"
        )


def validate_out_of_domain(policy: str) -> None:
    if policy not in OUT_OF_DOMAIN_POLICIES:
        raise ValueError(
            f"out_of_domain must be one of {OUT_OF_DOMAIN_POLICIES}, got {policy!r}"
        )


def _parse_sentinel(raw: str) -> Any:
    raw = raw.strip()
    try:
        return float(raw)
    except ValueError:
        return raw


def parse_sentinels(raw: str) -> Tuple[Any, ...]:
    return tuple(_parse_sentinel(part) for part in raw.split(',') if part.strip())


@dataclass
class Options:
    out_of_domain: str = 'keep'
    fill_direction: str = 'down'
    sentinels: Tuple[Any, ...] = (-99.0,)
    log_level: str = 'WARNING'

    def validate(self) -> None:
        validate_out_of_domain(self.out_of_domain)
        validate_fill_direction(self.fill_direction)
        if logging.getLevelName(self.log_level.upper()) == f"Level {self.log_level.upper()}":
            raise ValueError(f"unknown log level {self.log_level!r}")
        if not isinstance(self.sentinels, tuple):
            self.sentinels = tuple(self.sentinels)

    @classmethod
    def from_env(cls, environ=None) -> "Options":
        environ = os.environ if environ is None else environ
        opts = cls()
        if 'LACUNA_OUT_OF_DOMAIN' in environ:
            opts.out_of_domain = environ['LACUNA_OUT_OF_DOMAIN'].strip().lower()
        if 'LACUNA_FILL_DIRECTION' in environ:
            opts.fill_direction = environ['LACUNA_FILL_DIRECTION'].strip().lower()
        if 'LACUNA_SENTINELS' in environ:
            opts.sentinels = parse_sentinels(environ['LACUNA_SENTINELS'])
        if 'LACUNA_LOG_LEVEL' in environ:
            opts.log_level = environ['LACUNA_LOG_LEVEL'].strip().upper()
        opts.validate()
        return opts


options = Options.from_env()


@contextmanager
def option_context(**overrides: Any) -> Iterator[Options]:
    """Temporarily override fields of the global ``options``."""
    known = {f.name for f in fields(Options)}
    for name in overrides:
        if name not in known:
            raise KeyError(f"unknown option {name!r} (known: {sorted(known)})")
    saved = replace(options)
    for name, value in overrides.items():
        setattr(options, name, value)
    try:
        options.validate()
        yield options
    finally:
        for f in fields(Options):
            setattr(options, f.name, getattr(saved, f.name))


def configure_logging(level: str = None, stream=None) -> logging.Logger:
    """Attach a stream handler to the ``lacuna`` logger.

    The library installs no handler on import; call this from an
    application or notebook to see lacuna's debug output.
    """
    log = logging.getLogger("lacuna")
    level = (level or options.log_level).upper()
    log.setLevel(level)
    if not any(getattr(h, '_lacuna', False) for h in log.handlers):
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handler._lacuna = True
        log.addHandler(handler)
    return log

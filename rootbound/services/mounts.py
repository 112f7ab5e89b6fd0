from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import psutil

from ..config import settings

logger = logging.getLogger(__name__)

_PER_USER_BASES = {'/run/media'}


@dataclass(frozen=True)
class MountPoint:
    path: str
    label: str
    total_bytes: Optional[int] = None
    free_bytes: Optional[int] = None


def _mount_user() -> str:
    return settings.mount_user or os.environ.get('USER', '')


def candidate_bases() -> list[Path]:
    user = _mount_user()
    bases: list[Path] = []
    for raw in settings.mount_bases.split(','):
        base = raw.strip()
        if not base:
            continue
        # /run/media is laid out as /run/media/$USER/<label>
        if base in _PER_USER_BASES and user:
            bases.append(Path(base) / user)
        else:
            bases.append(Path(base))
    return bases


def _usage(path: Path) -> tuple[Optional[int], Optional[int]]:
    try:
        usage = psutil.disk_usage(str(path))
    except Exception:
        return None, None
    return usage.total, usage.free


def _is_linux() -> bool:
    return sys.platform.startswith('linux')


def list_mounts() -> list[MountPoint]:
    if not _is_linux():
        return []

    mounts: list[MountPoint] = []
    for base in candidate_bases():
        if not base.is_dir():
            continue
        try:
            children = sorted(base.iterdir(), key=lambda p: p.name)
        except OSError as exc:
            logger.warning('Cannot scan mount base %s: %s', base, exc)
            continue
        for child in children:
            if not child.is_dir():
                continue
            total, free = _usage(child)
            mounts.append(MountPoint(path=str(child), label=child.name or str(child), total_bytes=total, free_bytes=free))
    return mounts

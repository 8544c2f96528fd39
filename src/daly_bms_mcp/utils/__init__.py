"""Shared numeric helpers."""

from .checksum import checksum, fold_big_endian

"""
Key mapping between datastore keys and bucket object names.

    full_key("/ipfs", Key("/blocks/CIQA"))      → "ipfs/blocks/CIQA"
    full_key("/", Key("/a//b"))                 → "a/b"
    key_from_object_name("/ipfs", "ipfs/a/b")   → Key("/a/b")

Object names are always relative (no leading slash). Names that fall
outside the root namespace were not written by this store and map to None.
Names inside the namespace from other writers are parsed as keys as-is.
"""

from __future__ import annotations

import posixpath

from bucketstore.core.key import SEPARATOR, Key

CURRENT = "."


def _join(*parts: str) -> str:
    return posixpath.normpath(SEPARATOR.join((CURRENT,) + parts))


def root_prefix(root: str) -> str:
    """Normalized root, "" when the store lives at the bucket root."""
    return Key(root).value[1:]


def full_key(root: str, key: Key) -> str:
    """Object name for key under root."""
    return _join(root_prefix(root), str(key))


def key_from_object_name(root: str, name: str) -> Key | None:
    """Inverse of full_key; None for names outside root."""
    prefix = root_prefix(root)
    if not prefix:
        relative = name
    elif name == prefix:
        relative = ""
    elif name.startswith(prefix + SEPARATOR):
        relative = name[len(prefix) + 1 :]
    else:
        return None
    return Key(SEPARATOR + relative)


def listing_prefix(root: str, prefix: str) -> str:
    """
    Object-name prefix for a query prefix.

    Matching is a raw string prefix, so "/p" also matches "/pq". A trailing
    slash on the query prefix is kept to restrict matches to children,
    except for "/" itself, which must still match the root key.
    """
    normalized = Key(prefix)
    name = _join(root_prefix(root), str(normalized))
    if name == CURRENT:
        name = ""
    if prefix.endswith(SEPARATOR) and not normalized.is_root and name:
        name += SEPARATOR
    return name

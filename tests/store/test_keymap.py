"""Tests for key ↔ object name mapping."""

import pytest
from bucketstore.core.key import Key
from bucketstore.store.keymap import (
    full_key,
    key_from_object_name,
    listing_prefix,
    root_prefix,
)


@pytest.mark.parametrize(
    "root, key, expected",
    [
        ("/", "/a/b", "a/b"),
        ("/ipfs", "/blocks/CIQA", "ipfs/blocks/CIQA"),
        ("ipfs/", "/a", "ipfs/a"),
        ("//deep//root/", "/x", "deep/root/x"),
        ("/ipfs", "/", "ipfs"),
        ("/", "/", "."),
    ],
)
def test_full_key(root, key, expected):
    assert full_key(root, Key(key)) == expected


def test_full_key_normalizes_redundant_separators():
    assert full_key("/r", Key("//a//./b/")) == full_key("/r", Key("/a/b"))


def test_root_cannot_escape_upwards():
    assert root_prefix("/../../etc") == "etc"
    assert full_key("/..", Key("/a")) == "a"


@pytest.mark.parametrize("root", ["/", "/ipfs", "ipfs/data/"])
@pytest.mark.parametrize("key", ["/", "/a", "/a/b/c", "/with space/x.y"])
def test_mapping_is_invertible(root, key):
    assert key_from_object_name(root, full_key(root, Key(key))) == Key(key)


def test_foreign_names_outside_root_are_rejected():
    assert key_from_object_name("/ipfs", "other/a") is None
    assert key_from_object_name("/ipfs", "ipfs-backup/a") is None


def test_listing_prefix_whole_store():
    assert listing_prefix("/", "") == ""
    assert listing_prefix("/ipfs", "") == "ipfs"


def test_listing_prefix_is_raw_string_prefix():
    assert listing_prefix("/ipfs", "/p") == "ipfs/p"
    assert listing_prefix("/", "/p") == "p"


def test_listing_prefix_keeps_trailing_slash():
    assert listing_prefix("/ipfs", "/p/") == "ipfs/p/"
    assert listing_prefix("/", "/p/") == "p/"


def test_listing_prefix_slash_matches_root_key():
    assert listing_prefix("/ipfs", "/") == "ipfs"
    assert listing_prefix("/ipfs", "//") == "ipfs"
    assert listing_prefix("/", "/") == ""


def test_listing_prefix_cannot_escape_root():
    assert listing_prefix("/ipfs", "/../other") == "ipfs/other"

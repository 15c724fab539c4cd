"""Tests for LoadedFeaturesRegistry — identities and provided names."""

from __future__ import annotations

from pathlib import Path

from loadforge.core.loaded_features import LoadedFeaturesRegistry, feature_extension, feature_stem


class TestFeatureStem:
    def test_strips_known_extension(self):
        assert feature_stem("set.py", [".py", ".ext"]) == "set"

    def test_keeps_unknown_extension(self):
        assert feature_stem("set.txt", [".py"]) == "set.txt"

    def test_extension_alone_is_not_stripped(self):
        assert feature_stem(".py", [".py"]) == ".py"


class TestRegistry:
    def test_record_is_idempotent(self):
        registry = LoadedFeaturesRegistry()
        identity = Path("/lib/set.py")
        assert registry.record(identity) is True
        assert registry.record(identity) is False
        assert len(registry) == 1
        assert registry.contains(identity)

    def test_provided_names_ignore_extension(self):
        registry = LoadedFeaturesRegistry([".py", ".ext"])
        registry.record(Path("/lib/set.py"), feature="set.py")
        assert registry.provides("set")
        assert registry.provides("set.py")
        assert registry.identity_for("set") == Path("/lib/set.py")

    def test_builtin_provide(self):
        registry = LoadedFeaturesRegistry([".py"])
        registry.provide("enumerator")
        assert registry.provides("enumerator")
        assert registry.identity_for("enumerator") is None
        assert len(registry) == 0

    def test_features_keep_load_order(self):
        registry = LoadedFeaturesRegistry()
        registry.record(Path("/b.py"))
        registry.record(Path("/a.py"))
        assert registry.features() == [Path("/b.py"), Path("/a.py")]

    def test_stats(self):
        registry = LoadedFeaturesRegistry([".py"])
        registry.record(Path("/lib/set.py"), feature="set")
        registry.provide("thread")
        assert registry.get_stats() == {"total": 1, "provided": 2, "builtin": 1}

    def test_explicit_extension_only_matches_same_kind(self):
        registry = LoadedFeaturesRegistry([".py", ".ext"])
        registry.record(Path("/lib/foo.py"), feature="foo")
        assert registry.provides("foo")
        assert registry.provides("foo.py")
        assert not registry.provides("foo.ext")
        assert registry.identity_for("foo.ext") is None

    def test_bare_name_matches_extension_loaded_explicitly(self):
        registry = LoadedFeaturesRegistry([".py", ".ext"])
        registry.record(Path("/lib/foo.ext"), feature="foo.ext")
        assert registry.provides("foo")
        assert registry.identity_for("foo") == Path("/lib/foo.ext")
        assert not registry.provides("foo.py")


class TestFeatureExtension:
    def test_known_extension(self):
        assert feature_extension("zlib.ext", [".py", ".ext"]) == ".ext"

    def test_unknown_extension(self):
        assert feature_extension("zlib.so", [".py", ".ext"]) is None

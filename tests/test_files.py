"""Tests for critical_css_inliner.files module."""

from types import SimpleNamespace

from critical_css_inliner.files import UniformFile, is_uniform, wrap_asset


class TestWrapAsset:
    def test_wraps_asset(self):
        """wrap_asset builds a UniformFile rooted at the base path.

        Purpose: Verify cwd/base/path/contents of a wrapped asset.
        Category: Normal case
        Target: wrap_asset(name, base_path, contents)
        Technique: Equivalence partitioning
        Test data: "css/site.css" under "/build"
        """
        result = wrap_asset("css/site.css", "/build", b"h1{}")

        assert result == UniformFile(
            cwd="/build",
            base="/build",
            path="/build/css/site.css",
            contents=b"h1{}",
        )

    def test_single_separator_without_normalization(self):
        """Paths are joined with one separator and ".." is kept.

        Purpose: Verify plain join semantics with no path resolution.
        Category: Edge case
        Target: wrap_asset(name, base_path, contents)
        Technique: Boundary value analysis
        Test data: Base with trailing slash, name with ".."
        """
        assert wrap_asset("a.css", "dist/", b"").path == "dist/a.css"
        assert wrap_asset("../a.css", "dist", b"").path == "dist/../a.css"

    def test_leading_separator_in_name_kept_under_base(self):
        """A name starting with "/" is still joined under the base path.

        Purpose: Verify the base path is never discarded by the join.
        Category: Edge case
        Target: wrap_asset(name, base_path, contents)
        Technique: Boundary value analysis
        Test data: "/static/a.css" under "/build"
        """
        result = wrap_asset("/static/a.css", "/build", b"")

        assert result.path == "/build/static/a.css"
        assert result.relative == "static/a.css"

    def test_missing_base_path(self):
        """A None base path yields cwd/base "" and path equal to the name.

        Purpose: Verify wrapping when no extraction base is configured.
        Category: Edge case
        Target: wrap_asset(name, base_path, contents)
        Technique: Boundary value analysis
        Test data: base_path=None
        """
        result = wrap_asset("a.css", None, b"x")

        assert result.cwd == ""
        assert result.base == ""
        assert result.path == "a.css"

    def test_bytearray_contents_copied_to_bytes(self):
        """Contents are stored as immutable bytes.

        Purpose: Verify wrapped contents cannot change with the source buffer.
        Category: Edge case
        Target: wrap_asset(name, base_path, contents)
        Technique: Error guessing
        Test data: bytearray mutated after wrapping
        """
        buffer = bytearray(b"a{}")

        result = wrap_asset("a.css", "", buffer)
        buffer[0:1] = b"b"

        assert result.contents == b"a{}"

    def test_uniform_file_passed_through(self):
        """Wrapping an existing UniformFile returns the same object.

        Purpose: Verify wrap is a no-op on uniform files.
        Category: Normal case
        Target: wrap_asset(name, base_path, contents)
        Technique: Equivalence partitioning
        Test data: A UniformFile
        """
        uniform = UniformFile(cwd="/x", base="/x", path="/x/a.css", contents=b"a")

        assert wrap_asset(uniform, "/other", b"ignored") is uniform

    def test_duck_typed_uniform_file_passed_through(self):
        """Objects with the uniform file attributes pass through unchanged.

        Purpose: Verify the capability check accepts foreign file objects.
        Category: Normal case
        Target: wrap_asset(name, base_path, contents)
        Technique: Equivalence partitioning
        Test data: SimpleNamespace with cwd/base/path/contents
        """
        foreign = SimpleNamespace(cwd="", base="", path="a.css", contents=b"")

        assert wrap_asset(foreign, "/build", b"") is foreign


class TestIsUniform:
    def test_strings_are_not_uniform(self):
        """Asset names are not uniform files.

        Purpose: Verify the capability check rejects names.
        Category: Normal case
        Target: is_uniform(obj)
        Technique: Equivalence partitioning
        Test data: str and bytes
        """
        assert is_uniform("a.css") is False
        assert is_uniform(b"a.css") is False

    def test_partial_shape_is_not_uniform(self):
        """Objects missing any attribute are not uniform files.

        Purpose: Verify all four attributes are required.
        Category: Edge case
        Target: is_uniform(obj)
        Technique: Boundary value analysis
        Test data: Object without contents
        """
        assert is_uniform(SimpleNamespace(cwd="", base="", path="a.css")) is False


class TestUniformFileHelpers:
    def test_relative_and_text(self):
        """relative strips the base; text decodes the contents.

        Purpose: Verify convenience accessors.
        Category: Normal case
        Target: UniformFile.relative, UniformFile.text()
        Technique: Equivalence partitioning
        Test data: Wrapped asset under "/build"
        """
        result = wrap_asset("css/a.css", "/build", "h1{}".encode())

        assert result.relative == "css/a.css"
        assert result.text() == "h1{}"

"""Tests for template dependency extraction."""

from dashvars.resolve import extract_dependencies, references


class TestExtractDependencies:
    def test_single(self):
        assert extract_dependencies("SELECT * WHERE r = {{.region}}") == ["region"]

    def test_whitespace_inside_braces(self):
        assert extract_dependencies("{{ .region }}") == ["region"]
        assert extract_dependencies("{{\t.region\n}}") == ["region"]

    def test_duplicates_collapse(self):
        assert extract_dependencies("{{ .a }}{{.a}}") == ["a"]

    def test_first_occurrence_order(self):
        assert extract_dependencies("{{.b}} {{.a}} {{.b}} {{.c}}") == ["b", "a", "c"]

    def test_empty_and_none(self):
        assert extract_dependencies("") == []
        assert extract_dependencies(None) == []

    def test_no_matches(self):
        assert extract_dependencies("SELECT 1") == []

    def test_missing_dot_is_not_a_reference(self):
        assert extract_dependencies("{{region}}") == []

    def test_name_stops_at_whitespace(self):
        # "{{.a b}}" is not a valid reference: name followed by junk
        assert extract_dependencies("{{.a b}}") == []

    def test_punctuated_names(self):
        assert extract_dependencies("{{.k8s.cluster-name}}") == ["k8s.cluster-name"]

    def test_idempotent(self):
        template = "{{.x}} and {{ .y }}"
        assert extract_dependencies(template) == extract_dependencies(template)

    def test_single_braces_ignored(self):
        assert extract_dependencies("{.a}") == []


class TestReferences:
    def test_direct_reference(self):
        assert references("host = {{.service}}", "service")

    def test_prefix_is_not_reference(self):
        assert not references("host = {{.service_name}}", "service")

    def test_regex_chars_in_name(self):
        assert references("{{.a.b}}", "a.b")
        assert not references("{{.axb}}", "a.b")

    def test_empty_template(self):
        assert not references(None, "x")

from skillkit.frontmatter import parse_frontmatter, parse_install_spec, resolve_skill_metadata


def test_parse_frontmatter_reads_key_value_pairs_and_strips_quotes():
    content = (
        "---\n"
        "name: weather\n"
        'description: "Current conditions"\n'
        "homepage: 'https://example.com'\n"
        "---\n"
        "# Weather\n"
    )

    frontmatter = parse_frontmatter(content)

    assert frontmatter == {
        "name": "weather",
        "description": "Current conditions",
        "homepage": "https://example.com",
    }


def test_parse_frontmatter_normalizes_crlf_and_cr_line_endings():
    assert parse_frontmatter("---\r\nname: a\r\n---\r\nbody") == {"name": "a"}
    assert parse_frontmatter("---\rname: b\r---\rbody") == {"name": "b"}


def test_parse_frontmatter_returns_empty_mapping_for_missing_or_unterminated_block():
    assert parse_frontmatter("") == {}
    assert parse_frontmatter("# no frontmatter\nname: x\n") == {}
    assert parse_frontmatter("---\nname: x\nno closing line\n") == {}


def test_parse_frontmatter_skips_malformed_and_empty_lines():
    content = "---\nname: ok\n  indented: no\nnot a pair\nempty:\nkey_2: v2\n---\n"

    assert parse_frontmatter(content) == {"name": "ok", "key_2": "v2"}


def test_resolve_skill_metadata_decodes_namespaced_json():
    frontmatter = {
        "metadata": (
            '{"clawdis":{"always":true,"skillKey":"wx","primaryEnv":"WEATHER_KEY",'
            '"emoji":"sun","requires":{"bins":["curl"],"env":"A, B","config":["browser.enabled"]},'
            '"install":[{"kind":"brew","formula":"curl"},{"id":"npm","kind":"node","package":"wx-cli",'
            '"bins":["wx"],"label":"Install wx"}]}}'
        )
    }

    metadata = resolve_skill_metadata(frontmatter)

    assert metadata is not None
    assert metadata.always is True
    assert metadata.skill_key == "wx"
    assert metadata.primary_env == "WEATHER_KEY"
    assert metadata.emoji == "sun"
    assert metadata.requires is not None
    assert metadata.requires.bins == ["curl"]
    assert metadata.requires.env == ["A", "B"]
    assert metadata.requires.config == ["browser.enabled"]
    assert [spec.kind for spec in metadata.install] == ["brew", "node"]
    assert metadata.install[1].id == "npm"
    assert metadata.install[1].bins == ["wx"]
    assert metadata.install[1].label == "Install wx"


def test_resolve_skill_metadata_ignores_wrongly_typed_fields():
    frontmatter = {
        "metadata": '{"skillkit":{"always":"yes","skillKey":3,"primaryEnv":["X"],"requires":"bins"}}'
    }

    metadata = resolve_skill_metadata(frontmatter)

    assert metadata is not None
    assert metadata.always is None
    assert metadata.skill_key is None
    assert metadata.primary_env is None
    assert metadata.requires is None
    assert metadata.install == []


def test_resolve_skill_metadata_absorbs_bad_payloads():
    assert resolve_skill_metadata({}) is None
    assert resolve_skill_metadata({"metadata": "{not json"}) is None
    assert resolve_skill_metadata({"metadata": "[1, 2]"}) is None
    assert resolve_skill_metadata({"metadata": '{"clawdis": "nope"}'}) is None
    assert resolve_skill_metadata({"metadata": '{"other": {"always": true}}'}) is None


def test_install_specs_drop_unknown_or_missing_kinds():
    frontmatter = {
        "metadata": (
            '{"openclaw":{"install":['
            '{"kind":"apt","package":"x"},'
            '{"package":"no-kind"},'
            '"not-an-object",'
            '{"type":"UV","package":"ruff"}'
            "]}}"
        )
    }

    metadata = resolve_skill_metadata(frontmatter)

    assert metadata is not None
    assert len(metadata.install) == 1
    assert metadata.install[0].kind == "uv"
    assert metadata.install[0].package == "ruff"


def test_parse_install_spec_prefers_kind_over_type():
    spec = parse_install_spec({"kind": "go", "type": "brew", "module": "example.com/tool@latest"})

    assert spec is not None
    assert spec.kind == "go"
    assert spec.module == "example.com/tool@latest"
    assert spec.formula is None


def test_deeply_nested_metadata_is_treated_as_absent():
    frontmatter = {"metadata": "[" * 100_000 + "]" * 100_000}

    assert resolve_skill_metadata(frontmatter) is None

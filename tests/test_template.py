from gitconfig_server.services.template import TemplateEngine


def test_substitutes_known_names():
    engine = TemplateEngine()
    out = engine.substitute("url: jdbc://{{DB_HOST}}:{{ DB_PORT }}/app", {"DB_HOST": "db", "DB_PORT": "5432"})
    assert out == "url: jdbc://db:5432/app"


def test_unknown_placeholder_is_left_verbatim():
    engine = TemplateEngine()
    assert engine.substitute("{{UNSET_VAR}}", {}) == "{{UNSET_VAR}}"
    assert engine.substitute("a: {{  UNSET_VAR  }}", {"OTHER": "x"}) == "a: {{  UNSET_VAR  }}"


def test_text_without_placeholders_is_unchanged():
    engine = TemplateEngine()
    text = "plain: value\n{ not: a placeholder }\n{{ 1bad }}\n"
    assert engine.substitute(text, {"plain": "x"}) == text


def test_single_pass_does_not_expand_substituted_values():
    engine = TemplateEngine()
    out = engine.substitute("{{A}}", {"A": "{{B}}", "B": "nested"})
    assert out == "{{B}}"


def test_empty_value_replaces_placeholder():
    assert TemplateEngine().substitute("x={{EMPTY}}", {"EMPTY": ""}) == "x="


def test_engines_own_their_pattern():
    dollar = TemplateEngine(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")
    default = TemplateEngine()
    env = {"NAME": "svc"}
    assert dollar.substitute("${NAME} {{NAME}}", env) == "svc {{NAME}}"
    assert default.substitute("${NAME} {{NAME}}", env) == "${NAME} svc"

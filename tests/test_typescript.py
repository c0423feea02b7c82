from __future__ import annotations

from volumen import JointToken, StrToken, VarToken, parse_source
from volumen.testing import cut, interpolate


def _prompts(src: str, file: str = "prompts.ts"):
    return parse_source(src, file=file)


def test_naming_heuristic() -> None:
    src = 'const userPrompt = "Hello";\n'
    (p,) = _prompts(src)
    assert cut(src, p.span.inner) == "Hello"
    assert p.annotations == ()


def test_template_literal_vars() -> None:
    src = "const prompt = `Hello ${name}!`;\n"
    (p,) = _prompts(src)
    (var,) = p.vars
    assert var.exp == "${name}"
    assert cut(src, var.span.inner) == "name"
    assert interpolate(src, p) == "Hello {0}!"


def test_array_join() -> None:
    src = 'const prompt = ["Hello", user, "!"].join("\\n");\n'
    (p,) = _prompts(src)
    assert [type(t) for t in p.content] == [StrToken, JointToken, VarToken, JointToken, StrToken]
    assert cut(src, p.joint.inner) == "\\n"
    assert interpolate(src, p) == "Hello\\n{0}\\n!"


def test_concatenation_with_annotation() -> None:
    src = '// @prompt\nconst msg = "Hello, " + name + "!";\n'
    (p,) = _prompts(src)
    assert [type(t) for t in p.content] == [StrToken, VarToken, StrToken]
    assert p.joint.is_zero()
    assert p.annotations[0].exp == "// @prompt"


def test_reassignment_carries_declaration_annotation() -> None:
    src = "// @prompt\nlet x;\nx = `${v}`;\n"
    (p,) = _prompts(src)
    (ann,) = p.annotations
    assert ann.exp == "// @prompt"
    assert interpolate(src, p) == "{0}"
    assert cut(src, p.enclosure) == "x = `${v}`;"


def test_same_line_block_comment() -> None:
    src = '/* @prompt */ const greeting = "Hi";\n'
    (p,) = _prompts(src, "prompts.js")
    assert p.annotations[0].exp == "/* @prompt */"
    assert p.enclosure.start == 0


def test_trailing_inline_comment() -> None:
    src = 'const greeting = "Hi"; // @prompt\n'
    (p,) = _prompts(src)
    assert p.annotations[0].exp == "// @prompt"


def test_array_destructuring() -> None:
    src = 'const [aPrompt, b] = ["x", 2];\n'
    (p,) = _prompts(src)
    assert cut(src, p.span.inner) == "x"


def test_object_destructuring() -> None:
    src = 'const { systemPrompt, retries } = { systemPrompt: "Be brief", retries: 3 };\n'
    (p,) = _prompts(src)
    assert cut(src, p.span.inner) == "Be brief"


def test_class_field() -> None:
    src = 'class Agent {\n  // @prompt\n  instructions: string = "Be helpful";\n}\n'
    (p,) = _prompts(src)
    assert cut(src, p.span.inner) == "Be helpful"


def test_tsx_file() -> None:
    src = 'const prompt = "Hi";\nconst el = <div>{prompt}</div>;\n'
    (p,) = _prompts(src, "view.tsx")
    assert cut(src, p.span.inner) == "Hi"


def test_annotated_call_argument() -> None:
    src = 'await llm.complete(/* @prompt */ "Summarize");\n'
    (p,) = _prompts(src)
    assert cut(src, p.span.inner) == "Summarize"
    assert cut(src, p.enclosure) == 'llm.complete(/* @prompt */ "Summarize")'


def test_util_format() -> None:
    src = 'const prompt = util.format("Hi %s", name);\n'
    (p,) = _prompts(src)
    assert interpolate(src, p) == "Hi {0}"


def test_many_annotated_call_arguments() -> None:
    src = "".join(f'f(/* @prompt */ "a{i}");\n' for i in range(2000))
    prompts = _prompts(src)
    assert len(prompts) == 2000
    assert interpolate(src, prompts[-1]) == "a1999"


def test_argument_inside_an_emitted_prompt_is_not_repeated() -> None:
    src = 'f(/* @prompt */ util.format("Hi %s", g(/* @prompt */ "x")));\n'
    (p,) = _prompts(src)
    assert interpolate(src, p) == "Hi {0}"
    assert p.vars[0].exp == 'g(/* @prompt */ "x")'

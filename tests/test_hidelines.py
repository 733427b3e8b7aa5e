import pytest

from mdbinder.headers import PlaygroundConfig
from mdbinder.hidelines import (
    CodeConfig,
    hide_lines,
    hide_lines_rust,
    hide_lines_with_prefix,
    post_process,
)

RUST_CASES = [
    (
        '<pre class="playground"><code class="language-rust">\n# #![allow(unused)]\n# fn main() {\nx()\n# }</code></pre>',
        '<pre class="playground"><code class="language-rust">\n<span class="boring">#![allow(unused)]\n</span><span class="boring">fn main() {\n</span>x()\n<span class="boring">}</span></code></pre>',
    ),
    (
        '<pre class="playground"><code class="language-rust">\n#fn main() {\nx()\n#}</code></pre>',
        '<pre class="playground"><code class="language-rust">\n#fn main() {\nx()\n#}</code></pre>',
    ),
    (
        '<pre class="playground"><code class="language-rust">fn main() {}</code></pre>',
        '<pre class="playground"><code class="language-rust">fn main() {}</code></pre>',
    ),
    (
        '<pre class="playground"><code class="language-rust editable">let s = "foo\n # bar\n";</code></pre>',
        '<pre class="playground"><code class="language-rust editable">let s = "foo\n<span class="boring"> bar\n</span>";</code></pre>',
    ),
    (
        '<pre class="playground"><code class="language-rust editable">let s = "foo\n ## bar\n";</code></pre>',
        '<pre class="playground"><code class="language-rust editable">let s = "foo\n # bar\n";</code></pre>',
    ),
    (
        '<pre class="playground"><code class="language-rust editable">let s = "foo\n # bar\n#\n";</code></pre>',
        '<pre class="playground"><code class="language-rust editable">let s = "foo\n<span class="boring"> bar\n</span><span class="boring">\n</span>";</code></pre>',
    ),
    (
        '<code class="language-rust ignore">let s = "foo\n # bar\n";</code>',
        '<code class="language-rust ignore">let s = "foo\n<span class="boring"> bar\n</span>";</code>',
    ),
    (
        '<pre class="playground"><code class="language-rust editable">#![no_std]\nlet s = "foo";\n #[some_attr]</code></pre>',
        '<pre class="playground"><code class="language-rust editable">#![no_std]\nlet s = "foo";\n #[some_attr]</code></pre>',
    ),
]


@pytest.mark.parametrize("src, expected", RUST_CASES)
def test_hide_lines_language_rust(src, expected):
    assert hide_lines(src, CodeConfig()) == expected


OTHER_CASES = [
    (
        '<code class="language-python">~hidden()\nnothidden():\n~    hidden()\n    ~hidden()\n    nothidden()</code>',
        '<code class="language-python"><span class="boring">hidden()\n</span>nothidden():\n<span class="boring">    hidden()\n</span><span class="boring">    hidden()\n</span>    nothidden()\n</code>',
    ),
    (
        '<code class="language-python hidelines=!!!">!!!hidden()\nnothidden():\n!!!    hidden()\n    !!!hidden()\n    nothidden()</code>',
        '<code class="language-python hidelines=!!!"><span class="boring">hidden()\n</span>nothidden():\n<span class="boring">    hidden()\n</span><span class="boring">    hidden()\n</span>    nothidden()\n</code>',
    ),
]


@pytest.mark.parametrize("src, expected", OTHER_CASES)
def test_hide_lines_language_other(src, expected):
    assert hide_lines(src, CodeConfig(hidelines={"python": "~"})) == expected


def test_hide_lines_unknown_language_untouched():
    src = '<code class="language-go">~hidden()\n</code>'
    assert hide_lines(src, CodeConfig(hidelines={"python": "~"})) == src


def test_hide_lines_rust_strips_carriage_returns():
    assert hide_lines_rust("a\r\n# b\r\nc") == 'a\n<span class="boring">b\n</span>c'


def test_hide_lines_rust_drops_final_newline():
    assert hide_lines_rust("x()\n") == "x()"


def test_hide_lines_rust_other_marker_kept():
    assert hide_lines_rust("#[derive(Debug)]") == "#[derive(Debug)]"


def test_hide_lines_with_prefix_keeps_indent():
    assert (
        hide_lines_with_prefix("  %% a\nb", "%%")
        == '<span class="boring">   a\n</span>b\n'
    )


def test_hide_lines_with_prefix_empty():
    assert hide_lines_with_prefix("", "~") == ""


def test_post_process_full_pipeline():
    src = '<h1>Foo</h1><code class="language-rust">x()</code>'
    expected = (
        '<h1 id="foo"><a class="header" href="#foo">Foo</a></h1>'
        '<pre class="playground"><code class="language-rust">'
        '<span class="boring">#![allow(unused)]\n</span>'
        '<span class="boring">fn main() {\n</span>x()\n'
        '<span class="boring">}</span></code></pre>'
    )
    assert post_process(src, PlaygroundConfig(), CodeConfig(), None) == expected


def test_post_process_fixes_commas_and_respects_ignore():
    src = '<code class="language-rust,ignore">x()</code>'
    assert (
        post_process(src, PlaygroundConfig(), CodeConfig(), None)
        == '<code class="language-rust ignore">x()</code>'
    )
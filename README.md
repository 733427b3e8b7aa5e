# mdbinder

Building blocks for turning a collection of Markdown chapters into a book:
expanding helper directives in chapter text, exchanging a book with external
programs, and post-processing rendered HTML. It has no dependencies beyond
the standard library.

## Modules

- **`mdbinder.links`**: `find_links(contents)` yields a `Link` for every
  recognised directive, with `start_index`, `end_index`, `kind` and `text`.
  The kinds are `Include`, `RustdocInclude`, `Playground`, `Title` and
  `Escaped` (a `\{{#...}}` directive). `parse_include_path` and
  `parse_range_or_anchor` turn a target such as `file.rs:10:20` or
  `file.rs:anchor` into a `LineRange` (zero-based, half-open) or an `Anchor`.
  `{{#playpen ...}}` is accepted as an old name for `{{#playground ...}}`,
  with a logged warning.
- **`mdbinder.includes`**: `render_link(link, base, chapter_title)` renders
  one directive; `replace_all(s, path, source, depth, chapter_title)` expands
  all directives in a text, following nested includes up to ten levels deep,
  and returns `(text, chapter_title)`. A directive whose file cannot be read
  is logged and left in the text unchanged; `{{#title ...}}` sets the chapter
  title and is removed.
- **`mdbinder.index`**: `is_readme_file(path)` is true when the file stem is
  `readme` in any case; `index_path_for(path)` maps such a file to
  `index.md` in the same directory.
- **`mdbinder.preprocessors`**: `PreprocessorContext` and `CmdPreprocessor`.
  `CmdPreprocessor.run` sends `[context, book]` as JSON to an external
  program's stdin and reads the processed book back from its stdout;
  `supports_renderer` runs `<cmd> supports <renderer>` and checks for exit
  code 0. `parse_input` reads the pair a preprocessor program receives.
- **`mdbinder.renderers`**: `RenderContext` (with `source_dir`, `to_json`,
  `from_json`) and `CmdRenderer`, which runs an external program inside the
  destination directory and feeds it the context as JSON. A missing program
  is only a warning when `output.<name>.optional` is true in the config.
- **`mdbinder.headers`**: `build_header_links` gives each header a unique id
  and a self-link; `fix_code_blocks` turns comma-separated code classes into
  space-separated ones; `add_playground_pre` wraps runnable Rust blocks in a
  playground `<pre>`, adding a `main` function and an edition class
  (`RustEdition`) where needed, as set by `PlaygroundConfig`.
- **`mdbinder.hidelines`**: `hide_lines` wraps hidden lines of code blocks in
  `<span class="boring">`: `# ` lines in Rust, and lines starting with a
  per-language prefix from `CodeConfig` or a `hidelines=` class otherwise.
  `post_process` runs header links, class fixes, playgrounds and line hiding
  in that order.
- **`mdbinder.helpers`**: `path_to_root`, `theme_option` and `resource_path`.
- **`mdbinder.toc`**: `render_toc(chapters, fold_enable, fold_level,
  is_toc_html, no_section_label)` renders the chapter list as nested
  `<ol>` elements.

## Example

```python
from mdbinder.links import find_links
from mdbinder.headers import build_header_links

for link in find_links("See {{#include code.rs:5:10}} here."):
    print(link.start_index, link.end_index, link.kind)

print(build_header_links("<h1>Foo</h1><h3>Foo</h3>"))
# <h1 id="foo">...</h1><h3 id="foo-1">...</h3>
```

## What it does not do

This package does not convert Markdown to HTML, render page templates,
build a search index or copy theme and static asset files, and it has no
command-line tool. It supplies the steps around those: directive expansion
before rendering, and HTML post-processing and table of contents markup
after it.

## Running the tests

```
pip install .[test]
pytest
```
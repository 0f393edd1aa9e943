#!/usr/bin/env python3
"""
Page template, fixed stylesheet and the injected Mermaid rendering script.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import html
import json

DIAGRAM_LANGUAGE = "mermaid"
DIAGRAM_LIBRARY_URL = "https://cdn.jsdelivr.net/npm/mermaid@10/dist/mermaid.min.js"
DIAGRAM_THEME = "default"

# Expression the exporter polls for; true once the diagram script is finished or abandoned
DIAGRAM_DONE_EXPRESSION = "() => Boolean(window.__diagramRender && window.__diagramRender.done)"

DIAGRAM_REPORT_EXPRESSION = """() => {
    const state = window.__diagramRender;
    if (!state) return null;
    return {
        expected: state.expected,
        rendered: state.rendered,
        failed: state.failed,
        errors: state.errors.slice(),
        abandoned: state.abandoned
    };
}"""

DIAGRAM_ABANDON_EXPRESSION = """() => {
    const state = window.__diagramRender;
    if (state && !state.done) state.abandon();
    return state ? state.expected - state.rendered - state.failed : 0;
}"""

FOOTER_TEMPLATE = (
    '<div style="font-size: 10px; text-align: center; width: 100%; margin: 0 auto;">'
    '<span class="pageNumber"></span></div>'
)

DEFAULT_STYLESHEET = """
body {
    font-family: 'Helvetica Neue', Helvetica, Arial, sans-serif;
    line-height: 1.4;
    color: #333;
    margin: 0;
    padding: 0;
    font-size: 12px;
}

* {
    box-sizing: border-box;
}

h1, h2, h3, h4, h5, h6 {
    color: #2c3e50;
    margin-top: 0.8em;
    margin-bottom: 0.3em;
    font-weight: 600;
    page-break-after: avoid;
    break-after: avoid;
}

h1 {
    font-size: 1.6em;
    border-bottom: 2px solid #3498db;
    padding-bottom: 0.2em;
}

h2 {
    font-size: 1.3em;
    border-bottom: 1px solid #bdc3c7;
    padding-bottom: 0.1em;
}

p {
    margin: 0.5em 0;
}

code {
    background-color: #f8f9fa;
    border: 1px solid #e9ecef;
    border-radius: 3px;
    padding: 0.1em 0.3em;
    font-family: 'Courier New', Consolas, monospace;
    font-size: 0.8em;
}

pre {
    background-color: #f8f9fa;
    border: 1px solid #e9ecef;
    border-radius: 5px;
    padding: 0.5em;
    margin: 0.5em 0;
    font-size: 0.8em;
    white-space: pre-wrap;
}

pre code {
    background: none;
    border: none;
    padding: 0;
}

blockquote {
    border-left: 4px solid #3498db;
    margin: 0.5em 0;
    padding: 0.3em 0.8em;
    background-color: #f8f9fa;
    color: #555;
}

table {
    border-collapse: collapse;
    width: 100%;
    margin: 0.5em 0;
    font-size: 0.9em;
}

th, td {
    border: 1px solid #ddd;
    padding: 0.3em;
    text-align: left;
}

th {
    background-color: #f8f9fa;
    font-weight: 600;
}

img {
    max-width: 100%;
    height: auto;
}

/* Rendered diagrams: centered and framed */
div.mermaid {
    display: flex;
    justify-content: center;
    margin: 20px 0;
    padding: 10px;
    border: 1px solid #e9ecef;
    border-radius: 5px;
}

div.mermaid svg {
    max-width: 100%;
    height: auto;
}

pre.mermaid-pre {
    background: none;
    border: none;
}

pre.diagram-error {
    border-left: 4px solid #e74c3c;
}

.page-break {
    page-break-before: always;
}

pre, blockquote, table, img, div.mermaid {
    page-break-inside: avoid;
    break-inside: avoid;
}
"""


def build_diagram_script(library_url: str = DIAGRAM_LIBRARY_URL, theme: str = DIAGRAM_THEME) -> str:
    """Build the post-load script that turns mermaid code blocks into diagrams.

    The script publishes ``window.__diagramRender``. Its ``done`` flag flips
    exactly once, after every block has either rendered or been left as text,
    or after ``abandon()`` was called.
    """
    return f"""
(function () {{
    const state = window.__diagramRender = {{
        done: false, abandoned: false, expected: 0, rendered: 0, failed: 0, errors: []
    }};

    function finish() {{
        state.done = true;
    }}

    function asCode(node, source) {{
        const pre = document.createElement('pre');
        pre.className = 'mermaid-source diagram-error';
        const code = document.createElement('code');
        code.textContent = source;
        pre.appendChild(code);
        node.replaceWith(pre);
    }}

    state.abandon = function () {{
        state.abandoned = true;
        document.querySelectorAll('div.mermaid').forEach(node => {{
            if (!node.querySelector('svg')) asCode(node, node.dataset.source || node.textContent);
        }});
        finish();
    }};

    function collectBlocks() {{
        const blocks = [];
        document.querySelectorAll('pre.{DIAGRAM_LANGUAGE} > code, code.language-{DIAGRAM_LANGUAGE}').forEach(code => {{
            const pre = code.closest('pre') || code;
            if (!blocks.some(block => block.pre === pre)) {{
                blocks.push({{ pre: pre, source: code.textContent }});
            }}
        }});
        return blocks;
    }}

    function loadLibrary() {{
        return new Promise((resolve, reject) => {{
            const script = document.createElement('script');
            script.src = {json.dumps(library_url)};
            script.onload = () => resolve();
            script.onerror = () => reject(new Error('failed to load ' + script.src));
            document.head.appendChild(script);
        }});
    }}

    async function run() {{
        const blocks = collectBlocks();
        state.expected = blocks.length;
        if (!blocks.length) {{
            finish();
            return;
        }}

        try {{
            await loadLibrary();
            mermaid.initialize({{ startOnLoad: false, theme: {json.dumps(theme)} }});
        }} catch (err) {{
            state.errors.push(String(err));
            state.failed = blocks.length;
            finish();
            return;
        }}
        if (state.abandoned) return;

        const nodes = [];
        for (const block of blocks) {{
            block.pre.classList.add('mermaid-pre');
            try {{
                await mermaid.parse(block.source);
            }} catch (err) {{
                state.failed += 1;
                state.errors.push(String(err && err.message ? err.message : err));
                block.pre.classList.add('diagram-error');
                continue;
            }}
            if (state.abandoned) return;
            const placeholder = document.createElement('div');
            placeholder.className = 'mermaid';
            placeholder.dataset.source = block.source;
            placeholder.textContent = block.source;
            block.pre.replaceWith(placeholder);
            nodes.push(placeholder);
        }}

        if (nodes.length) {{
            try {{
                await mermaid.run({{ nodes: nodes, suppressErrors: true }});
            }} catch (err) {{
                state.errors.push(String(err && err.message ? err.message : err));
            }}
        }}
        if (state.abandoned) return;

        nodes.forEach(node => {{
            if (node.querySelector('svg')) {{
                state.rendered += 1;
            }} else {{
                state.failed += 1;
                asCode(node, node.dataset.source);
            }}
        }});
        finish();
    }}

    if (document.readyState === 'loading') {{
        document.addEventListener('DOMContentLoaded', () => {{ run(); }});
    }} else {{
        run();
    }}
}})();
"""


DEFAULT_DIAGRAM_SCRIPT = build_diagram_script()


def create_html_page(body: str, title: str, stylesheet: str, script: str = "", base_href: str = "") -> str:
    """Create the full HTML page around a pandoc fragment.

    ``base_href`` lets relative image links resolve against the markdown
    file's directory even though the page itself is loaded from a temp dir.
    """
    script_block = f"<script>{script}</script>" if script else ""
    base_tag = f'<base href="{html.escape(base_href)}">' if base_href else ""
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    {base_tag}
    <title>{html.escape(title)}</title>
    <style>{stylesheet}</style>
</head>
<body>
{body}
{script_block}
</body>
</html>
"""

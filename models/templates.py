"""Project scaffolding templates.

Each template knows how to build its own file tree, so large generated
scaffolds never have to survive a round trip through a chat payload. The
decoder uses a template's keywords to spot payloads that describe one of
these known shapes, and the workspace materializes the tree locally.
"""

import json
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field

from models.directives import Directive
from models.file_tree import Directory, FileLeaf, FileTree


class ProjectTemplate(BaseModel):
    """A known project shape that can be materialized on demand.

    Args:
        directive: Directive that requests this template.
        name: Human-readable template name.
        progress_text: Body of the synthetic "working on it" message.
        keywords: Lower-case markers that identify this template in a payload.
        builder: Zero-argument callable returning a fresh FileTree.
    """

    model_config = ConfigDict(frozen=True)

    directive: Directive
    name: str
    progress_text: str
    keywords: tuple[str, ...] = Field(default_factory=tuple)
    builder: Callable[[], FileTree]

    def build(self) -> FileTree:
        return self.builder()

    def matches(self, raw: str) -> bool:
        lowered = raw.lower()
        return any(keyword in lowered for keyword in self.keywords)


def _package_json(**fields) -> str:
    return json.dumps(fields, indent=2) + "\n"


def build_react_app_tree() -> FileTree:
    """Minimal create-react-app style project."""
    package_json = _package_json(
        name="react-app",
        version="0.1.0",
        private=True,
        dependencies={
            "react": "^18.2.0",
            "react-dom": "^18.2.0",
            "react-scripts": "5.0.1",
        },
        scripts={
            "start": "react-scripts start",
            "build": "react-scripts build",
            "test": "react-scripts test",
        },
    )
    index_html = (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "  <head>\n"
        '    <meta charset="utf-8" />\n'
        "    <title>React App</title>\n"
        "  </head>\n"
        "  <body>\n"
        '    <div id="root"></div>\n'
        "  </body>\n"
        "</html>\n"
    )
    index_js = (
        "import React from 'react';\n"
        "import ReactDOM from 'react-dom/client';\n"
        "import './App.css';\n"
        "import App from './App';\n"
        "\n"
        "const root = ReactDOM.createRoot(document.getElementById('root'));\n"
        "root.render(<App />);\n"
    )
    app_js = (
        "function App() {\n"
        "  return (\n"
        '    <div className="App">\n'
        "      <h1>Hello from React</h1>\n"
        "    </div>\n"
        "  );\n"
        "}\n"
        "\n"
        "export default App;\n"
    )
    app_css = ".App {\n  text-align: center;\n  font-family: sans-serif;\n}\n"

    return {
        "package.json": FileLeaf(contents=package_json),
        "public": Directory(children={"index.html": FileLeaf(contents=index_html)}),
        "src": Directory(
            children={
                "index.js": FileLeaf(contents=index_js),
                "App.js": FileLeaf(contents=app_js),
                "App.css": FileLeaf(contents=app_css),
            }
        ),
    }


def build_express_server_tree() -> FileTree:
    """Minimal express server with one router."""
    package_json = _package_json(
        name="express-server",
        version="1.0.0",
        main="app.js",
        scripts={"start": "node app.js"},
        dependencies={"express": "^4.18.2"},
    )
    app_js = (
        "const express = require('express');\n"
        "const indexRouter = require('./routes/index');\n"
        "\n"
        "const app = express();\n"
        "const port = process.env.PORT || 3000;\n"
        "\n"
        "app.use(express.json());\n"
        "app.use('/', indexRouter);\n"
        "\n"
        "app.listen(port, () => {\n"
        "  console.log(`Server listening on port ${port}`);\n"
        "});\n"
    )
    router_js = (
        "const express = require('express');\n"
        "\n"
        "const router = express.Router();\n"
        "\n"
        "router.get('/', (req, res) => {\n"
        "  res.json({ message: 'Hello from Express' });\n"
        "});\n"
        "\n"
        "module.exports = router;\n"
    )

    return {
        "package.json": FileLeaf(contents=package_json),
        "app.js": FileLeaf(contents=app_js),
        "routes": Directory(children={"index.js": FileLeaf(contents=router_js)}),
    }


TEMPLATES: dict[Directive, ProjectTemplate] = {
    Directive.CREATE_REACT_APP: ProjectTemplate(
        directive=Directive.CREATE_REACT_APP,
        name="React app",
        progress_text="Working on it: scaffolding a React app...",
        keywords=("react-scripts", "react-dom", "create-react-app"),
        builder=build_react_app_tree,
    ),
    Directive.CREATE_EXPRESS_SERVER: ProjectTemplate(
        directive=Directive.CREATE_EXPRESS_SERVER,
        name="Express server",
        progress_text="Working on it: scaffolding an Express server...",
        keywords=("require('express')", 'require(\\"express\\")', "express()"),
        builder=build_express_server_tree,
    ),
}


def get_template(directive: Directive) -> ProjectTemplate:
    return TEMPLATES[directive]


def match_template(raw: str) -> ProjectTemplate | None:
    """Return the first template whose keywords occur in raw, if any."""
    for template in TEMPLATES.values():
        if template.matches(raw):
            return template
    return None

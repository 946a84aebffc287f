"""
Static template files and the merge that lets them override model output.

Template bodies are read from disk on every call so edits to the template
directory take effect without a restart.
"""
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from exceptions import ConfigurationError
from models import GeneratedFile

SHOPIFY_DOMAIN_TOKEN = "{{SHOPIFY_DOMAIN}}"
SHOPIFY_TOKEN_TOKEN = "{{SHOPIFY_TOKEN}}"

# (project path, template filename)
TEMPLATE_FILES: Tuple[Tuple[str, str], ...] = (
    ("src/lib/shopify.ts", "shopify.ts.template"),
    ("src/lib/types.ts", "types.ts.template"),
    ("src/components/cart-provider.tsx", "cart-provider.tsx.template"),
    ("src/app/api/cart/route.ts", "cart-route.ts.template"),
    ("next.config.ts", "next.config.ts.template"),
    ("package.json", "package.json.template"),
    ("tsconfig.json", "tsconfig.json.template"),
    ("postcss.config.mjs", "postcss.config.mjs.template"),
    (".gitignore", "gitignore.template"),
    ("CLAUDE.md", "claude-md.template"),
    (".env.local", "env.local.template"),
)

ENV_FILE_PATH = ".env.local"


class TemplateLibrary:
    """Loads template bodies from a directory"""

    def __init__(self, template_dir: str):
        self.template_dir = Path(template_dir)

    def load_template(self, filename: str) -> str:
        path = self.template_dir / filename
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ConfigurationError(f"Template file not found: {path}") from e

    def build_template_files(
        self,
        shopify_domain: str,
        shopify_token: str
    ) -> List[GeneratedFile]:
        """All template entries, with Shopify values filled into .env.local"""
        files = []
        for path, filename in TEMPLATE_FILES:
            content = self.load_template(filename)
            if path == ENV_FILE_PATH:
                content = (
                    content
                    .replace(SHOPIFY_DOMAIN_TOKEN, shopify_domain)
                    .replace(SHOPIFY_TOKEN_TOKEN, shopify_token)
                )
            files.append(GeneratedFile(path=path, content=content))
        return files


def merge_with_templates(
    model_files: Iterable[GeneratedFile],
    template_files: Iterable[GeneratedFile]
) -> List[GeneratedFile]:
    """
    Combine model output with template files.

    Model files come first, minus any path a template claims; template
    files follow. Repeated model paths collapse into one entry holding the
    last content seen, at the position of the first occurrence.
    """
    templates = list(template_files)
    template_paths = {f.path for f in templates}

    merged: Dict[str, GeneratedFile] = {}
    for f in model_files:
        if f.path not in template_paths:
            merged[f.path] = f

    return list(merged.values()) + templates

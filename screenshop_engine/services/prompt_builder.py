"""
Prompt construction for storefront generation.

The system prompt is the output contract the model must honor. The
required-file table below is also used after parsing to check that the
model actually returned every file.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from exceptions import ClientInputError
from models import PageHint, ScreenshotPayload, SUPPORTED_MEDIA_TYPES


# (path, role) for every file the model must produce
REQUIRED_FILES: Tuple[Tuple[str, str], ...] = (
    ("src/app/page.tsx", "homepage with hero section, collections grid, featured products"),
    ("src/app/products/[handle]/page.tsx", "product detail page (server component)"),
    ("src/app/collections/[handle]/page.tsx", "collection listing page (server component)"),
    ("src/app/cart/page.tsx", "cart page with line items, quantity controls, checkout redirect"),
    ("src/app/layout.tsx", "root layout wrapping {children} in CartProvider, importing globals.css"),
    ("src/components/header.tsx", "navigation header with cart icon (client component for cart count)"),
    ("src/components/footer.tsx", "footer (server component)"),
    ("src/components/product-card.tsx", "product card used in homepage and collection pages"),
    ("src/components/product-gallery.tsx", 'image gallery with thumbnail selector (client component, "use client")'),
    ("src/components/product-options.tsx", 'variant selectors + add to cart button (client component, "use client", uses useCart)'),
    ("src/app/globals.css", "Tailwind base import + CSS custom properties for theme colors"),
)

REQUIRED_PATHS: Tuple[str, ...] = tuple(path for path, _ in REQUIRED_FILES)


def _required_files_section() -> str:
    lines = [
        f"{i}. {path} — {role}"
        for i, (path, role) in enumerate(REQUIRED_FILES, start=1)
    ]
    return "\n".join(lines)


SYSTEM_PROMPT = f"""You are an expert frontend engineer specializing in Next.js App Router, TypeScript, and Tailwind CSS 4. You analyze screenshots of ecommerce websites and generate complete, production-ready Next.js storefronts.

CRITICAL OUTPUT RULES:
- Output ONLY a valid JSON object. No prose. No markdown fences. No text outside the JSON.
- The JSON schema is exactly: {{ "files": [{{ "path": string, "content": string }}] }}
- Every file must be complete and immediately runnable. No placeholders. No TODOs. No ellipsis.

REQUIRED FILES — generate all {len(REQUIRED_FILES)}, no more, no less:
{_required_files_section()}

SHOPIFY IMPORTS — use these exact import paths, never reimplement:
- import {{ getProducts, getProduct, getCollections, getCollection }} from "@/lib/shopify"
- import {{ useCart }} from "@/components/cart-provider"
- import type {{ Product, Collection, Cart, CartLine, Money }} from "@/lib/types"
- Cart API is at /api/cart — CartProvider handles all cart state
- Checkout: redirect to cart.checkoutUrl — never build custom checkout UI

TECHNOLOGY RULES:
- Tailwind CSS 4 utility classes only. No inline styles.
- CSS custom properties allowed in globals.css only.
- TypeScript strict types on all components and functions.
- Server components by default. Only use "use client" when using hooks or event handlers.
- next/image for all images. next/link for all navigation.

DESIGN EXTRACTION RULES:
- Identify the color palette from screenshots. Define as --color-primary, --color-secondary, --color-accent, --color-bg, --color-text in globals.css.
- Match the typography hierarchy: heading size/weight, body weight, letter-spacing.
- Replicate the card layout: aspect ratio, image treatment, product info structure.
- Replicate the header: logo position (left/center), nav alignment, icon cluster.
- Replicate the hero: full-width vs split layout, overlay style, CTA button style.
- Replicate spacing rhythm: container max-width, section padding, grid gaps.
- Preserve color scheme faithfully: dark site stays dark, light site stays light.

CONTENT RULES:
- Never copy brand names, logos, or real product names. Use neutral placeholders: "Store", "Collection", "Product Name", etc.
- Never copy real pricing. Use placeholder: $99.00
- Product images use next/image with a placeholder src prop (will be populated from Shopify at runtime)

FORBIDDEN:
- No checkout UI beyond redirecting to cart.checkoutUrl
- No auth of any kind
- No database calls
- No hardcoded Shopify credentials — they come from environment variables via @/lib/shopify
- No Stripe, no payment logic"""


@dataclass(frozen=True)
class PromptPayload:
    system_prompt: str
    messages: List[Dict[str, Any]]


def build_image_block(screenshot: ScreenshotPayload) -> Dict[str, Any]:
    if screenshot.mime_type not in SUPPORTED_MEDIA_TYPES:
        raise ClientInputError(f"Unsupported image type: {screenshot.mime_type}")
    return {
        "type": "image",
        "source": {
            "type": "base64",
            "media_type": screenshot.mime_type,
            "data": screenshot.base64,
        },
    }


def build_context_text(screenshot_count: int, page_hints: Sequence[PageHint]) -> str:
    hint_text = "\n".join(
        f"Screenshot {i}: {PageHint(hint).value}"
        for i, hint in enumerate(page_hints, start=1)
    )
    return (
        f"Analyze the {screenshot_count} screenshot(s) provided above.\n\n"
        f"Page context:\n{hint_text}\n\n"
        "Generate the complete Next.js App Router storefront JSON now. "
        f"Extract the visual design faithfully and output all {len(REQUIRED_FILES)} required files."
    )


def build_prompt(
    screenshots: Sequence[ScreenshotPayload],
    page_hints: Sequence[PageHint]
) -> PromptPayload:
    """
    Build the system prompt and the single user message for a generation.

    Image blocks come first, in upload order, followed by one text block
    that pairs each screenshot number with its page hint.
    """
    if len(screenshots) != len(page_hints):
        raise ClientInputError(
            f"Got {len(page_hints)} page hints for {len(screenshots)} screenshots"
        )

    content = [build_image_block(s) for s in screenshots]
    content.append({
        "type": "text",
        "text": build_context_text(len(screenshots), page_hints),
    })

    return PromptPayload(
        system_prompt=SYSTEM_PROMPT,
        messages=[{"role": "user", "content": content}],
    )

import pytest

from exceptions import ClientInputError
from models import PageHint, ScreenshotPayload
from services.prompt_builder import (
    REQUIRED_FILES,
    REQUIRED_PATHS,
    SYSTEM_PROMPT,
    build_prompt,
)


def _shot(data: str = "aGVsbG8=", mime: str = "image/webp") -> ScreenshotPayload:
    return ScreenshotPayload(base64=data, mimeType=mime)


def test_two_screenshots_homepage_and_cart():
    prompt = build_prompt(
        [_shot("AAAA"), _shot("BBBB")],
        [PageHint.HOMEPAGE, PageHint.CART]
    )

    assert len(prompt.messages) == 1
    message = prompt.messages[0]
    assert message["role"] == "user"

    content = message["content"]
    assert [block["type"] for block in content] == ["image", "image", "text"]
    assert content[0]["source"] == {"type": "base64", "media_type": "image/webp", "data": "AAAA"}
    assert content[1]["source"]["data"] == "BBBB"

    text = content[2]["text"]
    assert "Screenshot 1: Homepage\nScreenshot 2: Cart" in text
    assert text.startswith("Analyze the 2 screenshot(s) provided above.")
    assert "output all 11 required files" in text


def test_hint_labels_use_display_names():
    prompt = build_prompt(
        [_shot(), _shot(), _shot()],
        [PageHint.PRODUCT_PAGE, PageHint.COLLECTION_PAGE, PageHint.OTHER]
    )
    text = prompt.messages[0]["content"][-1]["text"]
    assert "Screenshot 1: Product Page\nScreenshot 2: Collection Page\nScreenshot 3: Other" in text


def test_system_prompt_lists_every_required_file():
    assert len(REQUIRED_FILES) == 11
    for i, path in enumerate(REQUIRED_PATHS, start=1):
        assert f"{i}. {path}" in SYSTEM_PROMPT
    assert "generate all 11, no more, no less" in SYSTEM_PROMPT


def test_system_prompt_states_output_contract_and_prohibitions():
    assert '{ "files": [{ "path": string, "content": string }] }' in SYSTEM_PROMPT
    assert 'from "@/lib/shopify"' in SYSTEM_PROMPT
    assert 'from "@/components/cart-provider"' in SYSTEM_PROMPT
    assert "No auth of any kind" in SYSTEM_PROMPT
    assert "No database calls" in SYSTEM_PROMPT
    assert "Never copy real pricing" in SYSTEM_PROMPT


def test_prompt_is_deterministic():
    shots = [_shot("AAAA"), _shot("BBBB")]
    hints = [PageHint.HOMEPAGE, PageHint.CART]
    assert build_prompt(shots, hints) == build_prompt(shots, hints)


def test_mismatched_hint_count_is_rejected():
    with pytest.raises(ClientInputError):
        build_prompt([_shot(), _shot()], [PageHint.HOMEPAGE])


def test_unsupported_media_type_is_rejected():
    with pytest.raises(ClientInputError, match="image/bmp"):
        build_prompt([_shot(mime="image/bmp")], [PageHint.HOMEPAGE])

import asyncio

from listenai.mt import translate_block


def main():
    text = "Hello world! How are you today?"
    result = asyncio.run(translate_block(text, "en", "pl"))

    print(f"Input: {text}")
    print(f"Output: {result}")

    assert result is not None, "Translation failed"
    assert result
    print("\nMT smoke test passed!")


if __name__ == "__main__":
    main()

import os

import httpx

STORE_URL = os.getenv("STORE_URL", "http://localhost:8000/")


def main():
    payload = {"text": "Hello world\n\nSecond block", "sourceLang": "en", "targetLang": "de"}

    response = httpx.post(STORE_URL, json=payload, timeout=10.0)
    assert response.status_code == 200, f"Expected 200, got {response.status_code}"
    assert response.json() == {"status": "success"}

    response = httpx.get(STORE_URL, params={"action": "fetch"}, timeout=10.0)
    assert response.status_code == 200, f"Expected 200, got {response.status_code}"

    result = response.json()
    print(f"Fetched: {result}")
    assert result == payload

    response = httpx.post(STORE_URL, json={"text": "missing languages"}, timeout=10.0)
    assert response.status_code == 400, f"Expected 400, got {response.status_code}"

    print("\nStore smoke test passed!")


if __name__ == "__main__":
    main()

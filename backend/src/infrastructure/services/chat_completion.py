"""
OpenAI-compatible chat completion call shared by the AI collaborators
"""
from typing import Dict, List

import httpx

from core.exceptions import CollaboratorUnavailableException


async def chat_completion(
    client: httpx.AsyncClient,
    collaborator: str,
    api_url: str,
    api_key: str,
    model: str,
    messages: List[Dict[str, str]],
    temperature: float = 0.7,
    max_tokens: int = 500,
) -> str:
    """
    POST a chat completion and return the first choice's text

    Raises:
        CollaboratorUnavailableException: transport error, non-2xx status or malformed body
    """
    try:
        response = await client.post(
            api_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": model,
                "messages": messages,
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
        )
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        raise CollaboratorUnavailableException(
            collaborator, f"HTTP {status} from {api_url}", retryable=status == 429 or status >= 500
        ) from e
    except httpx.TimeoutException as e:
        raise CollaboratorUnavailableException(collaborator, "request timed out", retryable=True) from e
    except httpx.HTTPError as e:
        raise CollaboratorUnavailableException(collaborator, f"{type(e).__name__}: {e}") from e
    except ValueError as e:
        raise CollaboratorUnavailableException(collaborator, "response was not JSON") from e

    try:
        return (data["choices"][0]["message"]["content"] or "").strip()
    except (KeyError, IndexError, TypeError) as e:
        raise CollaboratorUnavailableException(collaborator, "unexpected response shape") from e

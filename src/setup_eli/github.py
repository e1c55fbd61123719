"""GitHub API client for listing eli releases and downloading assets."""

import asyncio
import dataclasses
import json
import logging
import pathlib
import time
import typing as tp

import beartype
import requests

import setup_eli.errors

logger = logging.getLogger(__name__)

_API_BASE = "https://api.github.com"
_ATTEMPTS = 3

ELI_GITHUB_OWNER = "alis-is"
ELI_GITHUB_REPOSITORY = "eli"


@beartype.beartype
@dataclasses.dataclass(frozen=True)
class ReleaseAsset:
    """Release asset metadata."""

    name: str
    url: str


@beartype.beartype
@dataclasses.dataclass(frozen=True)
class Release:
    """GitHub release metadata."""

    tag: str
    assets: tuple[ReleaseAsset, ...]
    prerelease: bool = False
    draft: bool = False


class GitHubClient:
    """GitHub API client with retries on network errors."""

    def __init__(self, token: str | None) -> None:
        self._token = token
        self._session = requests.Session()

    @beartype.beartype
    def list_releases(
        self, owner: str, repo: str, per_page: int = 100
    ) -> tuple[Release, ...]:
        """Fetch every published release of owner/repo, following pagination."""
        url: str | None = f"{_API_BASE}/repos/{owner}/{repo}/releases"
        params: dict[str, str] | None = {"per_page": str(per_page)}
        releases: list[Release] = []

        while url is not None:
            response = self._get(
                url,
                headers=self._headers("application/vnd.github+json"),
                params=params,
                not_found=setup_eli.errors.TransportError(
                    message=f"Repository {owner}/{repo} not found",
                    hint="Check the owner and name of the release repository.",
                ),
            )
            data = _decode_json(response)
            if not isinstance(data, list):
                raise setup_eli.errors.TransportError(
                    message=f"Unexpected response from GitHub for {owner}/{repo} releases",
                )
            releases.extend(_parse_release(item) for item in data)

            # The next link already carries the query string.
            url = response.links.get("next", {}).get("url")
            params = None

        logger.debug("Fetched %d releases for %s/%s", len(releases), owner, repo)
        return tuple(releases)

    @beartype.beartype
    def download_asset(self, url: str, dest_fpath: pathlib.Path) -> None:
        """Stream a release asset to dest_fpath."""
        response = self._get(
            url,
            headers=self._headers("application/octet-stream"),
            stream=True,
            not_found=setup_eli.errors.TransportError(
                message=f"Release asset not found: {url}",
                hint="The asset may have been removed from the release.",
            ),
        )

        dest_fpath.parent.mkdir(parents=True, exist_ok=True)
        n_bytes = 0
        try:
            with dest_fpath.open("wb") as fd:
                for chunk in response.iter_content(chunk_size=1024 * 1024):
                    fd.write(chunk)
                    n_bytes += len(chunk)
        except requests.RequestException as err:
            raise setup_eli.errors.TransportError(
                message=f"Download of {url} was interrupted: {err}",
            ) from None
        logger.debug("Downloaded %d bytes from %s", n_bytes, url)

    def _headers(self, accept: str) -> dict[str, str]:
        headers = {"Accept": accept}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    @beartype.beartype
    def _get(
        self,
        url: str,
        *,
        headers: dict[str, str],
        not_found: setup_eli.errors.TransportError,
        params: dict[str, str] | None = None,
        stream: bool = False,
    ) -> requests.Response:
        """GET url, retrying network errors, and map error statuses to EliErrors."""
        for attempt in range(_ATTEMPTS):
            try:
                response = self._session.get(
                    url, headers=headers, params=params, timeout=30, stream=stream
                )
            except requests.RequestException as err:
                if attempt + 1 == _ATTEMPTS:
                    raise setup_eli.errors.TransportError(
                        message=f"Network error contacting GitHub: {err}",
                    ) from None
                logger.debug("Request to %s failed (%s), retrying", url, err)
                time.sleep(2**attempt)
                continue

            _check_status(response, url, not_found, authenticated=bool(self._token))
            return response

        raise AssertionError("unreachable")


class GitHubReleaseSource:
    """Async release source backed by the eli GitHub repository."""

    def __init__(
        self,
        client: GitHubClient,
        owner: str = ELI_GITHUB_OWNER,
        repo: str = ELI_GITHUB_REPOSITORY,
    ) -> None:
        self._client = client
        self._owner = owner
        self._repo = repo

    async def list_releases(self) -> tuple[Release, ...]:
        try:
            return await asyncio.to_thread(
                self._client.list_releases, self._owner, self._repo
            )
        except setup_eli.errors.TransportError as err:
            raise setup_eli.errors.CatalogUnavailableError(
                message=f"Unable to list releases of {self._owner}/{self._repo}: {err.message}",
                hint=err.hint,
            ) from None

    async def download(self, url: str, dest_fpath: pathlib.Path) -> pathlib.Path:
        await asyncio.to_thread(self._client.download_asset, url, dest_fpath)
        return dest_fpath


@beartype.beartype
def _check_status(
    response: requests.Response,
    url: str,
    not_found: setup_eli.errors.TransportError,
    *,
    authenticated: bool,
) -> None:
    status = response.status_code
    if status < 400:
        return
    if status == 404:
        raise not_found

    rate_limited = response.headers.get("X-RateLimit-Remaining") == "0"
    if status in {401, 403} and authenticated and not rate_limited:
        raise setup_eli.errors.AuthError()
    if status in {403, 429} or rate_limited:
        hint = (
            "Wait for the rate limit to reset."
            if authenticated
            else "Pass a token input or set GITHUB_TOKEN to increase the limit."
        )
        raise setup_eli.errors.TransportError(
            message="GitHub API rate limit exceeded.", hint=hint
        )

    raise setup_eli.errors.TransportError(
        message=f"GitHub API error ({status}) for {url}",
    )


@beartype.beartype
def _decode_json(response: requests.Response) -> object:
    try:
        return response.json()
    except json.JSONDecodeError as err:
        raise setup_eli.errors.TransportError(
            message=f"Invalid JSON response from GitHub: {err}",
        ) from None


@beartype.beartype
def _parse_release(item: object) -> Release:
    """Parse one entry of the releases listing."""
    if not isinstance(item, dict):
        raise setup_eli.errors.TransportError(
            message=f"Unexpected release entry in GitHub response: {item!r}",
        )
    data = tp.cast(dict[str, object], item)

    tag = data.get("tag_name")
    if not isinstance(tag, str) or not tag:
        raise setup_eli.errors.TransportError(message="Release JSON missing tag_name")

    assets_data = data.get("assets")
    if not isinstance(assets_data, list):
        raise setup_eli.errors.TransportError(
            message=f"Release JSON missing assets for {tag}",
        )

    assets = [
        asset for asset in map(_parse_asset, assets_data) if asset is not None
    ]
    return Release(
        tag=tag,
        assets=tuple(assets),
        prerelease=data.get("prerelease") is True,
        draft=data.get("draft") is True,
    )


@beartype.beartype
def _parse_asset(item: object) -> ReleaseAsset | None:
    if not isinstance(item, dict):
        return None
    name = item.get("name")
    url = item.get("browser_download_url")
    if not isinstance(name, str) or not isinstance(url, str):
        logger.debug("Skipping malformed release asset %r", item)
        return None
    return ReleaseAsset(name=name, url=url)

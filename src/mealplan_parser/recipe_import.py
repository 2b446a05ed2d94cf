"""Recipe import: URL guard, page fetching and the field-level merge.

Importing a recipe from a link runs three steps:

1. ``normalize_recipe_import_url`` validates user input and rejects anything
   that is not a public http(s) address, before any network access
2. ``fetch_recipe_html`` downloads the page (manual redirects, each hop
   re-validated)
3. ``parse_recipe_from_html`` runs both extraction strategies and merges
   their results field by field

``import_recipe`` chains the three.

Example:
    >>> normalize_recipe_import_url("example.com/recipe")
    'https://example.com/recipe'
    >>> normalize_recipe_import_url("192.168.1.5/recipe") is None
    True
"""

import functools
import ipaddress
import logging
import re
from urllib.parse import urljoin, urlsplit, urlunsplit

import httpx

from .config import ImportConfig
from .exceptions import InvalidRecipeUrlError, RecipeFetchError
from .heuristic import extract_heuristic_recipe
from .html_text import make_soup
from .models import DEFAULT_SERVINGS, ImportedRecipe, MealType, ScrapedRecipe
from .protocols import HtmlFetcher
from .structured import extract_structured_recipe

logger = logging.getLogger(__name__)

MAX_URL_LENGTH = 2000
ALLOWED_SCHEMES = ("http", "https")
DEFAULT_PORTS = {"http": 80, "https": 443}

ACCEPT_HEADER = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

BLOCKED_HOSTNAMES = frozenset({"localhost", "0.0.0.0"})
BLOCKED_HOST_SUFFIXES = (".local", ".localhost")

BLOCKED_NETWORKS: tuple[ipaddress.IPv4Network | ipaddress.IPv6Network, ...] = (
    ipaddress.ip_network("0.0.0.0/8"),
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("169.254.0.0/16"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("::/128"),
    ipaddress.ip_network("::1/128"),
    ipaddress.ip_network("fe80::/10"),
    ipaddress.ip_network("fc00::/7"),
)
_IPV4_COMPATIBLE = ipaddress.ip_network("::/96")

_EXPLICIT_SCHEME_RE = re.compile(r"^([a-z][a-z0-9+.-]*)://", re.IGNORECASE)
# Hosts made only of decimal/hex labels are IP literals to a resolver even when
# not in dotted-quad form ("127.1", "2130706433", "0x7f.0.0.1")
_NUMERIC_HOST_RE = re.compile(r"^(?:0x[0-9a-f]*|\d+)(?:\.(?:0x[0-9a-f]*|\d+))*$")


# -- Merge -------------------------------------------------------------------


def parse_recipe_from_html(page_html: str) -> ScrapedRecipe:
    """Extract a recipe from a page, merging both strategies field by field.

    Embedded structured data and the heuristic text scan both run on every
    page. For each field the structured value wins when it is non-empty,
    otherwise the heuristic value is used, otherwise the default.

    Args:
        page_html: Raw HTML of the page

    Returns:
        ScrapedRecipe; never raises for malformed content

    Example:
        >>> recipe = parse_recipe_from_html(page_html)
        >>> recipe.servings
        4
    """
    soup = make_soup(page_html)
    # Structured extraction reads the scripts the heuristic flattener removes
    structured = extract_structured_recipe(soup)
    heuristic = extract_heuristic_recipe(soup)

    if structured is None:
        logger.debug("No structured recipe data, using heuristic extraction")
        return heuristic

    return ScrapedRecipe(
        name=structured.name or heuristic.name,
        description=structured.description or heuristic.description,
        ingredients=structured.ingredients or heuristic.ingredients,
        steps=structured.steps or heuristic.steps,
        servings=structured.servings or heuristic.servings or DEFAULT_SERVINGS,
        meal_type=structured.meal_type or heuristic.meal_type or MealType.NONE,
    )


# -- URL guard -----------------------------------------------------------------


def _is_blocked_address(address: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    if isinstance(address, ipaddress.IPv6Address):
        if address.ipv4_mapped is not None:
            address = address.ipv4_mapped
        elif address in _IPV4_COMPATIBLE:
            # Deprecated ::a.b.c.d form; "::" and "::1" map into 0.0.0.0/8
            address = ipaddress.IPv4Address(int(address))
    return any(address in network for network in BLOCKED_NETWORKS)


def is_private_hostname(hostname: str) -> bool:
    """Check whether a hostname points at a local, private or internal address.

    Blocks ``localhost``, ``*.local``, the unspecified address, the private,
    loopback and link-local IPv4 ranges, their IPv4-mapped and IPv4-compatible
    IPv6 forms, IPv6 loopback, link-local and unique-local ranges, and numeric
    hosts that are not canonical dotted quads. Hostnames are not resolved.

    Examples:
        >>> is_private_hostname("10.0.0.8")
        True
        >>> is_private_hostname("fd12::1")
        True
        >>> is_private_hostname("example.com")
        False
    """
    normalized = hostname.strip().lower().rstrip(".").strip("[]")
    if not normalized:
        return True
    if normalized in BLOCKED_HOSTNAMES or normalized.endswith(BLOCKED_HOST_SUFFIXES):
        return True

    try:
        address = ipaddress.ip_address(normalized)
    except ValueError:
        return bool(_NUMERIC_HOST_RE.match(normalized))
    return _is_blocked_address(address)


def normalize_recipe_import_url(value: str) -> str | None:
    """Validate and normalize a user-supplied recipe URL.

    Bare input gets an ``https://`` scheme. Only http and https are
    accepted, the URL must name a public host, and user credentials are not
    allowed.

    Args:
        value: Raw user input

    Returns:
        The normalized URL (lowercase scheme and host, "/" for an empty
        path, default port dropped), or None when the input is rejected
    """
    raw = (value or "").strip()
    if not raw or len(raw) > MAX_URL_LENGTH:
        return None

    scheme_match = _EXPLICIT_SCHEME_RE.match(raw)
    if scheme_match and scheme_match.group(1).lower() not in ALLOWED_SCHEMES:
        return None
    candidate = raw if scheme_match else f"https://{raw}"

    try:
        parts = urlsplit(candidate)
        port = parts.port
    except ValueError:
        return None

    scheme = parts.scheme.lower()
    hostname = parts.hostname
    if scheme not in ALLOWED_SCHEMES or not hostname:
        return None
    if parts.username is not None or parts.password is not None:
        return None
    if any(char.isspace() for char in hostname) or is_private_hostname(hostname):
        return None

    netloc = f"[{hostname}]" if ":" in hostname else hostname
    if port is not None and port != DEFAULT_PORTS[scheme]:
        netloc = f"{netloc}:{port}"

    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, parts.fragment))


# -- Fetch ---------------------------------------------------------------------


def _request_headers(config: ImportConfig) -> dict[str, str]:
    return {
        "Accept": ACCEPT_HEADER,
        "Accept-Language": config.accept_language,
        "User-Agent": config.user_agent,
    }


async def _get(client: httpx.AsyncClient, url: str, config: ImportConfig) -> httpx.Response:
    try:
        return await client.get(
            url,
            headers=_request_headers(config),
            timeout=config.fetch_timeout,
            follow_redirects=False,
        )
    except httpx.TimeoutException as e:
        logger.warning(f"Timed out fetching {url}: {e}")
        raise RecipeFetchError(
            "Timed out fetching recipe page.", url=url, retryable=True
        ) from e
    except httpx.TransportError as e:
        logger.warning(f"Network error fetching {url}: {e}")
        raise RecipeFetchError(
            "Could not connect to recipe page.", url=url, retryable=True
        ) from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning(f"Request for {url} failed: {e}")
        raise RecipeFetchError("Failed to fetch recipe page.", url=url) from e


def _redirect_target(response: httpx.Response, current_url: str) -> str:
    # is_redirect guarantees a Location header
    location = response.headers["location"].strip()
    target = normalize_recipe_import_url(urljoin(current_url, location))
    if target is None:
        raise RecipeFetchError(
            "Recipe page redirected to a disallowed URL.",
            url=current_url,
            status_code=response.status_code,
            location=location,
        )
    return target


async def _fetch_with_redirects(
    client: httpx.AsyncClient, url: str, config: ImportConfig
) -> str:
    current_url = url

    for hop in range(config.max_redirects + 1):
        response = await _get(client, current_url, config)

        if response.is_redirect:
            target = _redirect_target(response, current_url)
            logger.debug(f"Redirect {hop + 1}: {current_url} -> {target}")
            current_url = target
            continue

        if not response.is_success:
            logger.warning(f"Fetching {current_url} returned HTTP {response.status_code}")
            raise RecipeFetchError.from_status(current_url, response.status_code)

        page_html = response.text
        if not page_html.strip():
            raise RecipeFetchError("Recipe page returned empty content.", url=current_url)

        logger.info(f"Fetched {len(page_html)} characters from {current_url}")
        return page_html

    raise RecipeFetchError(
        "Recipe page redirected too many times.",
        url=url,
        max_redirects=config.max_redirects,
    )


async def fetch_recipe_html(
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    config: ImportConfig | None = None,
) -> str:
    """Download the HTML of a recipe page.

    Issues a GET with browser-like Accept headers and the configured
    timeout. Redirects are followed by hand so that every hop passes the URL
    guard. There is no internal retry; see :mod:`mealplan_parser.retry`.

    Args:
        url: URL already accepted by ``normalize_recipe_import_url``
        client: Client to send the request with; a temporary one is created
            and closed when omitted
        config: Fetch settings; defaults to ``ImportConfig()``

    Returns:
        Page HTML (never empty)

    Raises:
        RecipeFetchError: On timeout, network failure, a non-2xx status, a
            redirect to a disallowed URL, too many redirects or an empty body
    """
    config = config or ImportConfig()
    logger.info(f"Fetching recipe page {url}")

    if client is not None:
        return await _fetch_with_redirects(client, url, config)

    async with httpx.AsyncClient() as owned_client:
        return await _fetch_with_redirects(owned_client, url, config)


# -- Orchestration -------------------------------------------------------------


async def import_recipe(
    url: str,
    *,
    fetcher: HtmlFetcher | None = None,
    config: ImportConfig | None = None,
) -> ImportedRecipe:
    """Validate a URL, fetch the page and extract its recipe.

    Args:
        url: Raw user input
        fetcher: Page fetcher; defaults to ``fetch_recipe_html`` with ``config``
        config: Fetch settings used by the default fetcher

    Returns:
        ImportedRecipe carrying the normalized source URL

    Raises:
        InvalidRecipeUrlError: If the URL is rejected by the guard
        RecipeFetchError: If the page cannot be retrieved
    """
    normalized = normalize_recipe_import_url(url)
    if normalized is None:
        raise InvalidRecipeUrlError("Please enter a valid public http(s) URL.", url=url)

    if fetcher is None:
        fetcher = functools.partial(fetch_recipe_html, config=config)

    page_html = await fetcher(normalized)
    recipe = parse_recipe_from_html(page_html)
    logger.info(
        f"Imported '{recipe.name}' from {normalized}: "
        f"{len(recipe.ingredients)} ingredients, {len(recipe.steps)} steps"
    )
    return ImportedRecipe(**recipe.model_dump(), source_url=normalized)

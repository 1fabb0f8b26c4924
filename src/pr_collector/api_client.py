import enum
import logging
from dataclasses import dataclass, fields

import requests

from pr_collector.errors import (
    ApiError,
    NetworkError,
    RecordDecodeError,
    ValidationError,
)

DEFAULT_ENDPOINT = "https://ipb.osinfra.cn/pulls"
DEFAULT_MAX_PAGES = 99


class StopReason(enum.Enum):
    END_OF_PAGES = "end-of-pages"
    CUTOFF_REACHED = "cutoff-reached"
    PAGE_LIMIT_REACHED = "page-limit-reached"


@dataclass
class PullRequestRecord:
    org: str
    repo: str
    ref: str
    sig: str
    link: str
    state: str
    author: str
    assignees: str
    created_at: str
    updated_at: str
    title: str
    labels: str
    draft: bool
    mergeable: bool

    @classmethod
    def from_dict(cls, data):
        """
        Builds a record from one decoded JSON object.
        Raises RecordDecodeError if a field is missing or has the wrong type.
        """
        if not isinstance(data, dict):
            raise RecordDecodeError(
                f"Expected a pull request object, got {type(data).__name__}"
            )

        values = {}
        for field in fields(cls):
            if field.name not in data:
                raise RecordDecodeError(
                    f"Pull request record is missing field '{field.name}'"
                )
            value = data[field.name]
            if not isinstance(value, field.type):
                raise RecordDecodeError(
                    f"Pull request field '{field.name}' should be "
                    f"{field.type.__name__}, got {type(value).__name__}"
                )
            values[field.name] = value
        return cls(**values)


def build_query_url(base, author, state):
    """
    Builds the per-author query URL: base?author=<author>&state=<state>.
    Values are inserted verbatim, callers must pass endpoint-safe tokens.
    """
    if not author:
        raise ValidationError("No author information supplied for the query.")
    if not state:
        raise ValidationError("No state information supplied for the query.")

    return f"{base}?author={author}&state={state}"


def page_url(url, page):
    return f"{url}&page={page}"


def fetch_page(url):
    """
    Fetches one page of pull requests.

    Returns:
        A list of PullRequestRecord (possibly empty), or None when the
        response carries no `data`, which marks the end of the pages.
    """
    logging.debug(f"Making API request to {url}")
    try:
        response = requests.get(url)
    except requests.exceptions.ConnectionError as e:
        raise NetworkError(
            f"Network connection failed. Please check your internet connection and try again. Details: {e}"
        )
    except requests.exceptions.RequestException as e:
        raise NetworkError(
            f"Network error occurred while contacting the pulls API. Details: {e}"
        )

    if response.status_code != 200:
        raise ApiError(
            f"Pulls API request failed with status {response.status_code}. "
            f"URL: {url}. "
            f"Response: {response.text}",
            status_code=response.status_code,
            response_text=response.text,
        )

    try:
        body = response.json()
    except ValueError as e:
        raise ApiError(
            f"Invalid JSON response from the pulls API. Details: {e}",
            status_code=response.status_code,
            response_text=response.text,
        )

    if not isinstance(body, dict):
        raise ApiError(
            f"Unexpected response from the pulls API, expected an object with a 'data' field. URL: {url}",
            status_code=response.status_code,
            response_text=response.text,
        )

    data = body.get("data")
    if data is None:
        return None
    if not isinstance(data, list):
        raise RecordDecodeError(
            f"Expected 'data' to be a list of pull requests, got {type(data).__name__}"
        )

    return [PullRequestRecord.from_dict(item) for item in data]


class PaginationEngine:
    """
    Walks the pages of one author's query until the end marker, the cutoff
    or the page limit is reached.

    Pages are expected newest first, so the first record created before the
    cutoff ends the scan: the rest of that page and all later pages are
    skipped.
    """

    def __init__(self, fetch=fetch_page, max_pages=DEFAULT_MAX_PAGES):
        if max_pages < 1:
            raise ValidationError(
                f"The page limit must be at least 1, got {max_pages}."
            )
        self.fetch = fetch
        self.max_pages = max_pages

    def scan(self, base_url, cutoff, on_record):
        """
        Feeds every accepted record to `on_record` in arrival order.
        Returns the StopReason that ended the scan.
        """
        for page in range(1, self.max_pages + 1):
            records = self.fetch(page_url(base_url, page))
            if records is None:
                logging.debug(f"No data on page {page}, end of pages")
                return StopReason.END_OF_PAGES

            for record in records:
                # Both sides use the zero-padded "%Y-%m-%d %H:%M:%S" form
                if record.created_at < cutoff:
                    logging.debug(
                        f"Record {record.link} created at {record.created_at} "
                        f"is before {cutoff}, stopping on page {page}"
                    )
                    return StopReason.CUTOFF_REACHED
                on_record(record)

        logging.warning(
            f"Stopped after {self.max_pages} pages without reaching the end of the results"
        )
        return StopReason.PAGE_LIMIT_REACHED

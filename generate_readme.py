"""
GitHub Profile README Generator
Renders README.md from README_template.md and the project list in profile.yml,
with live star counts and a random three-card tarot spread.
"""

import logging
import os
import posixpath
import random
import sys
import time
from dataclasses import dataclass, field

import requests
import yaml

PROFILE_PATH = "profile.yml"
TEMPLATE_PATH = "README_template.md"
OUTPUT_PATH = "README.md"
LOG_LEVEL = "INFO"

GITHUB_PREFIX = "https://github.com/"
GITHUB_API_PREFIX = "https://api.github.com/repos/"

PROJECTS_PLACEHOLDER = b"{{PROJECTS}}"
TAROTS_PLACEHOLDER = b"{{TAROTS}}"

TAROT_BASE_URL = "https://raw.githubusercontent.com/Altonhe/Altonhe/master/tarot/"
REVERSED_STYLE = 'style="transform: rotate(180deg);"'
TAROT_COUNT = 3

# Minor arcana suits run 01..14, major arcana 00..21
TAROTS = tuple(
    [f"cups{n:02d}.jpg" for n in range(1, 15)]
    + [f"maj{n:02d}.jpg" for n in range(0, 22)]
    + [f"pents{n:02d}.jpg" for n in range(1, 15)]
    + [f"swords{n:02d}.jpg" for n in range(1, 15)]
    + [f"wands{n:02d}.jpg" for n in range(1, 15)]
)

log = logging.getLogger("readme")


class ProfileError(Exception):
    """Fatal error: the README cannot be generated."""


@dataclass(frozen=True)
class Project:
    icon: str
    link: str
    description: str
    name: str = ""
    tags: tuple = field(default_factory=tuple)


@dataclass(frozen=True)
class Profile:
    projects: tuple = field(default_factory=tuple)


# ------------------ Profile loading ------------------


def _scalar_text(value):
    # Unquoted YAML scalars (2048, 3.0, true) render as the text they were written as
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def _required_str(raw, key, index):
    value = _scalar_text(raw.get(key))
    if value is None:
        raise ProfileError(f"projects[{index}]: '{key}' must be a string, got {raw.get(key)!r}")
    return value


def parse_project(raw, index=0):
    """Builds a Project from one mapping of profile.yml"""
    if not isinstance(raw, dict):
        raise ProfileError(f"projects[{index}]: expected a mapping, got {type(raw).__name__}")

    name = ""
    if raw.get("name") is not None:
        name = _required_str(raw, "name", index)

    tags = raw.get("tags") or []
    if not isinstance(tags, list):
        raise ProfileError(f"projects[{index}]: 'tags' must be a list of strings")
    tag_texts = [_scalar_text(tag) for tag in tags]
    if None in tag_texts:
        raise ProfileError(f"projects[{index}]: 'tags' must be a list of strings")

    return Project(
        icon=_required_str(raw, "icon", index),
        link=_required_str(raw, "link", index),
        description=_required_str(raw, "desc", index),
        name=name,
        tags=tuple(tag_texts),
    )


def load_profile(path=PROFILE_PATH):
    """
    Reads profile.yml into a Profile. Any problem with the file is fatal,
    there is no partial load.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ProfileError(f"Failed to read {path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ProfileError(f"Failed to unmarshal profile: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ProfileError(f"Failed to unmarshal profile: expected a mapping at the top of {path}")

    projects = data.get("projects")
    if not isinstance(projects, list):
        raise ProfileError(f"Failed to unmarshal profile: 'projects' must be a list in {path}")

    return Profile(projects=tuple(parse_project(raw, i) for i, raw in enumerate(projects)))


# ------------------ Project rendering ------------------


def display_name(project):
    """Explicit name, else the last path segment of the link"""
    if project.name:
        return project.name
    return posixpath.basename(project.link.rstrip("/")) or project.link


def is_github_link(link):
    return link.startswith(GITHUB_PREFIX)


def repo_api_url(link):
    return link.replace(GITHUB_PREFIX, GITHUB_API_PREFIX)


def get_repo_star_count(link):
    """
    Fetches the stargazer count for a github.com repository link.
    Raises requests.RequestException on network or HTTP errors and
    ValueError when the body is not the expected JSON object.
    """
    response = requests.get(repo_api_url(link))
    response.raise_for_status()

    meta = response.json()
    if not isinstance(meta, dict):
        raise ValueError(f"unexpected repository metadata: {meta!r}")
    count = meta.get("stargazers_count")
    if not isinstance(count, int) or isinstance(count, bool):
        raise ValueError(f"missing stargazers_count in response for {link}")
    return count


def star_badge(link, count):
    if not count:
        return ""
    return f"/ [★{count}]({link}/stargazers)"


def tag_markdown(tags):
    if not tags:
        return ""
    return "/" + "".join(f" `{tag}`" for tag in tags)


def render_project(project, fetch_stars=get_repo_star_count):
    """Renders one '- icon [name](link) - desc stars tags' list item"""
    name = display_name(project)

    stars = ""
    if is_github_link(project.link):
        log.info("Fetching %r star count...", name)
        try:
            stars = star_badge(project.link, fetch_stars(project.link))
        except (requests.RequestException, ValueError) as e:
            log.error("Failed to get repo's star count: %s", e)

    return (
        f"- {project.icon} [{name}]({project.link}) - {project.description} "
        f"{stars} {tag_markdown(project.tags)}\n"
    )


def render_projects(projects, fetch_stars=get_repo_star_count):
    return "".join(render_project(project, fetch_stars) for project in projects)


# ------------------ Tarot spread ------------------


def shuffle(items, rng):
    """
    In-place unbiased shuffle. Each step swaps a uniformly chosen element of
    the remaining prefix to its end and shrinks the prefix by one.
    """
    for n in range(len(items), 0, -1):
        i = rng.randrange(n)
        items[n - 1], items[i] = items[i], items[n - 1]
    return items


def tarot_image(card, reversed_=False):
    src = f"{TAROT_BASE_URL}{card}"
    if reversed_:
        return f'<img {REVERSED_STYLE} src="{src}" width="25%" />'
    return f'<img src="{src}" width="25%" />'


def pick_tarots(rng=None, coin=None, count=TAROT_COUNT):
    """
    Draws `count` distinct cards, each randomly upright or reversed.
    The shuffle is seeded from the clock; the coin flips use the
    module-level generator unless one is passed in.
    """
    if rng is None:
        rng = random.Random(int(time.time()))
    if coin is None:
        coin = random

    deck = shuffle(list(TAROTS), rng)
    return "".join(
        tarot_image(card, reversed_=coin.getrandbits(1) == 0) for card in deck[:count]
    )


# ------------------ Template & output ------------------


def read_template(path=TEMPLATE_PATH):
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise ProfileError(f"Failed to read README template: {e}") from e


def fill_template(template, projects_md, tarots_md):
    """Literal placeholder substitution on the raw template bytes"""
    content = template.replace(PROJECTS_PLACEHOLDER, projects_md.encode("utf-8"))
    return content.replace(TAROTS_PLACEHOLDER, tarots_md.encode("utf-8"))


def write_readme(content, path=OUTPUT_PATH):
    """Writes next to the target and renames, so a failed write keeps the old file"""
    tmp_path = f"{path}.tmp"
    try:
        with open(tmp_path, "wb") as f:
            f.write(content)
        os.replace(tmp_path, path)
    except OSError as e:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise ProfileError(f"Failed to write {path}: {e}") from e


def generate(
    profile_path=PROFILE_PATH,
    template_path=TEMPLATE_PATH,
    output_path=OUTPUT_PATH,
    fetch_stars=get_repo_star_count,
    rng=None,
    coin=None,
):
    """Runs the whole pipeline and returns the bytes written"""
    profile = load_profile(profile_path)
    log.info("Loaded %d projects from %s", len(profile.projects), profile_path)

    template = read_template(template_path)

    projects_md = render_projects(profile.projects, fetch_stars)
    tarots_md = pick_tarots(rng=rng, coin=coin)

    content = fill_template(template, projects_md, tarots_md)
    write_readme(content, output_path)
    log.info("Updated: %s", output_path)
    return content


def main():
    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format="%(asctime)s [%(levelname)s] %(message)s",
        stream=sys.stderr,
    )

    print("=" * 60)
    print("GitHub Profile README Generator")
    print("=" * 60)

    start_time = time.perf_counter()
    try:
        generate(PROFILE_PATH, TEMPLATE_PATH, OUTPUT_PATH)
    except ProfileError as e:
        log.critical("%s", e)
        return 1

    print(f"  Total time: {time.perf_counter() - start_time:.2f} seconds")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Fetching and parsing maven-metadata.xml from Maven Central."""

from __future__ import annotations

import xml.etree.ElementTree as ET

import requests

MAVEN_CENTRAL = "https://repo1.maven.org/maven2"


class MetadataError(Exception):
    """Raised when repository metadata cannot be fetched or parsed."""


def _child(element: ET.Element, tag: str) -> ET.Element:
    found = element.find(tag)
    if found is None:
        raise MetadataError(f"missing field `{tag}`")
    return found


def _text(element: ET.Element) -> str:
    return (element.text or "").strip()


def parse_maven_metadata(xml_text: str) -> tuple[str | None, list[str]]:
    """Return the release version (if any) and all listed versions."""
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        raise MetadataError(str(exc)) from exc
    _child(root, "groupId")
    _child(root, "artifactId")
    versioning = _child(root, "versioning")
    release_el = versioning.find("release")
    release = _text(release_el) if release_el is not None else None
    versions = [_text(v) for v in _child(versioning, "versions").findall("version")]
    if not versions:
        raise MetadataError("missing field `version`")
    return release, versions


def fetch_maven_metadata(group_id: str, artifact_id: str) -> tuple[str | None, list[str]]:
    """Download and parse the metadata for `group_id:artifact_id`."""
    group_path = group_id.replace(".", "/")
    url = f"{MAVEN_CENTRAL}/{group_path}/{artifact_id}/maven-metadata.xml"
    print(f"🌎 Fetching metadata from: {url}")
    try:
        response = requests.get(url, timeout=30)
        body = response.text
    except requests.RequestException as exc:
        raise MetadataError(str(exc)) from exc
    return parse_maven_metadata(body)
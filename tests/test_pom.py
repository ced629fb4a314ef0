import pytest
import requests
import responses

from grind.config import Dependency
from grind.pom import (
    EffectiveDependency,
    Parent,
    PomDependency,
    PomError,
    PomId,
    build_pom_url,
    get_effective_dependencies,
    get_pom,
    parse_pom,
    substitute_properties,
)

NS = 'xmlns="http://maven.apache.org/POM/4.0.0"'

PARENT_POM = f"""<project {NS}>
  <groupId>com.example</groupId>
  <artifactId>parent</artifactId>
  <version>1.0</version>
  <properties>
    <lib.version>2.5</lib.version>
  </properties>
  <dependencyManagement>
    <dependencies>
      <dependency>
        <groupId>org.lib</groupId>
        <artifactId>core</artifactId>
        <version>${{lib.version}}</version>
      </dependency>
      <dependency>
        <groupId>org.bom</groupId>
        <artifactId>bom</artifactId>
        <version>1.1</version>
        <type>pom</type>
        <scope>import</scope>
      </dependency>
    </dependencies>
  </dependencyManagement>
</project>"""

BOM_POM = f"""<project {NS}>
  <groupId>org.bom</groupId>
  <artifactId>bom</artifactId>
  <version>1.1</version>
  <dependencyManagement>
    <dependencies>
      <dependency>
        <groupId>org.extra</groupId>
        <artifactId>extra</artifactId>
        <version>3.0</version>
      </dependency>
    </dependencies>
  </dependencyManagement>
</project>"""

CHILD_POM = f"""<project {NS}>
  <parent>
    <groupId>com.example</groupId>
    <artifactId>parent</artifactId>
    <version>1.0</version>
  </parent>
  <artifactId>child</artifactId>
  <dependencies>
    <dependency><groupId>org.lib</groupId><artifactId>core</artifactId></dependency>
    <dependency><groupId>org.extra</groupId><artifactId>extra</artifactId></dependency>
    <dependency>
      <groupId>org.opt</groupId><artifactId>opt</artifactId>
      <version>1.0</version><optional>true</optional>
    </dependency>
    <dependency>
      <groupId>org.test</groupId><artifactId>tester</artifactId>
      <version>4.0</version><scope>test</scope>
    </dependency>
    <dependency><groupId>org.nover</groupId><artifactId>nover</artifactId></dependency>
    <dependency>
      <groupId>${{project.groupId}}</groupId><artifactId>sibling</artifactId>
      <version>${{project.version}}</version>
    </dependency>
  </dependencies>
</project>"""


def _cache(root, group, artifact, version, text):
    cache = root / "cache"
    cache.mkdir(exist_ok=True)
    (cache / f"{group}_{artifact}_{version}.pom").write_text(text)


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _cache(tmp_path, "com.example", "parent", "1.0", PARENT_POM)
    _cache(tmp_path, "org.bom", "bom", "1.1", BOM_POM)
    _cache(tmp_path, "com.example", "child", "1.0", CHILD_POM)
    return tmp_path


def test_pom_id_display():
    assert str(PomId("junit", "junit", "4.13.2")) == "junit:junit:4.13.2"


def test_build_pom_url():
    assert (
        build_pom_url("org.hamcrest", "hamcrest-core", "1.3")
        == "https://repo1.maven.org/maven2/org/hamcrest/hamcrest-core/1.3/hamcrest-core-1.3.pom"
    )


def test_substitute_properties_replaces_all():
    assert substitute_properties("${a}-${b}", {"a": "1", "b": "2"}) == "1-2"


def test_substitute_properties_leaves_unknown():
    assert substitute_properties("${missing}", {"a": "1"}) == "${missing}"


def test_parse_pom_fields():
    pom = parse_pom(PARENT_POM)
    assert pom.group_id == "com.example"
    assert pom.artifact_id == "parent"
    assert pom.version == "1.0"
    assert pom.parent is None
    assert pom.properties == {"lib.version": "2.5"}
    assert pom.dependency_management[1] == PomDependency(
        "org.bom", "bom", "1.1", type="pom", scope="import"
    )
    assert pom.dependencies == []


def test_parse_pom_parent_and_optional():
    pom = parse_pom(CHILD_POM)
    assert pom.parent == Parent("com.example", "parent", "1.0")
    assert pom.group_id is None
    assert pom.dependencies[2].optional == "true"
    assert len(pom.dependencies) == 6


def test_parse_pom_missing_required_field():
    with pytest.raises(PomError):
        parse_pom("<project><dependencies><dependency><groupId>x</groupId>"
                  "</dependency></dependencies></project>")


def test_parse_pom_invalid_xml():
    with pytest.raises(PomError):
        parse_pom("<project>")


def test_effective_dependencies(workspace):
    visited = set()
    deps = get_effective_dependencies(PomId("com.example", "child", "1.0"), visited)
    assert deps == [
        EffectiveDependency("org.lib", "core", "2.5", "compile"),
        EffectiveDependency("org.extra", "extra", "3.0", "compile"),
        EffectiveDependency("org.test", "tester", "4.0", "test"),
        EffectiveDependency("com.example", "sibling", "1.0", "compile"),
    ]
    assert {
        PomId("com.example", "child", "1.0"),
        PomId("com.example", "parent", "1.0"),
        PomId("org.bom", "bom", "1.1"),
    } <= visited


def test_self_parent_cycle(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _cache(tmp_path, "a", "a", "1", """<project>
      <parent><groupId>a</groupId><artifactId>a</artifactId><version>1</version></parent>
      <artifactId>a</artifactId>
      <dependencies>
        <dependency><groupId>b</groupId><artifactId>b</artifactId><version>2</version></dependency>
      </dependencies>
    </project>""")
    deps = get_effective_dependencies(PomId("a", "a", "1"))
    assert deps == [EffectiveDependency("b", "b", "2", "compile")]


def test_unparseable_pom_returns_none(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    _cache(tmp_path, "bad", "bad", "1", "not xml <")
    assert get_effective_dependencies(PomId("bad", "bad", "1")) is None
    assert "Failed to resolve dependencies for bad:bad:1" in capsys.readouterr().err


def test_get_pom_fetches_and_caches(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    dep = Dependency("org.x", "y", "1.0")
    body = "<project><artifactId>y</artifactId></project>"
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, build_pom_url("org.x", "y", "1.0"), body=body)
        assert get_pom(dep) == body
        assert get_pom(dep) == body
        assert len(rsps.calls) == 1
    assert (tmp_path / "cache" / "org.x_y_1.0.pom").read_text() == body


def test_get_pom_network_error(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            build_pom_url("org.x", "z", "1.0"),
            body=requests.ConnectionError("down"),
        )
        with pytest.raises(PomError):
            get_pom(Dependency("org.x", "z", "1.0"))
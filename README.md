# grind

Java builds, without the headache.

`grind` is a Python library for building Java projects. It scaffolds new
projects, resolves dependencies from Maven Central (transitive ones, parent
POMs and imported BOMs included), records the resolved tree in `grind.lock`,
compiles with `javac`, packages jars and single runnable "fat jars", checks
directories against MD5 integrity manifests, and can install and switch
grind-owned JDKs.

## Installation

```shell
pip install .
```

Building needs `bash` and a JDK (`javac`, `jar`) on the machine;
`grind.jdk.use` can install one.

## What is not included

The package is a library only. It installs no `grind` command, and it has no
helpers for running a compiled program or for running the tasks listed under
`tasks` in `grind.yml`. Call the functions below from your own Python code.

## Modules

| Module | What it provides |
| --- | --- |
| `grind.config` | `Grind`, `Project`, `Dependency`, `Profile`, `RunArgs`; `load_grind`, `save_grind`; `get_flags`, `get_envs`, `get_run_args`; `ConfigError` |
| `grind.lock` | `Lock`, `get_lock_file`, `lock_file` for `grind.lock` |
| `grind.metadata` | `parse_maven_metadata`, `fetch_maven_metadata`; `MetadataError` |
| `grind.pom` | `parse_pom`, `get_pom` (cached under `cache/`), `get_effective_dependencies`, `substitute_properties`, `build_pom_url`; `PomError` |
| `grind.install` | `execute_install`, `resolve_all_deps`, `fetch_deps`, `download_jar`, `filter_invalid`, `fix_collisions`, `is_version_newer`; `DownloadError` |
| `grind.manage` | `execute_add`, `execute_remove`, `search_deps`, `parse_coordinate`, `update_grind`, `delete_jar` |
| `grind.builder` | `BuildTarget`, `execute_build`, `build_manifest` |
| `grind.uberjar` | `FatJarConfig`, `build_fat_jar`, `generate_manifest`, `is_signature_file`, `is_mergeable`, `merge_resource` |
| `grind.integrity` | `generate_integrity_data`, `verify_integrity_data`, `write_integrity_file`, `validate_integrity`; `IntegrityError` |
| `grind.scaffold` | `create` |
| `grind.testrunner` | `run_tests`, `check_plugin_exists`, `check_plugin_integrity`, `download_test_plugin`, `unzip_test_plugin` |
| `grind.jdk` | `list_releases`, `current`, `use`, `remove`, `get_jdk_detail`, `get_java_version`, `set_bashrc_path`, `strip_bashrc_path`, `format_bytes`, `map_os`, `map_arch`; `JdkError` |
| `grind.util` | `shell`, `shell_stream`, `shell_result`, `shell_custom_path`, `GrindPath`, `compare_maven_versions`, `unzip_file`, `extract_tar_gz`, `expand_tilde`, `dir_exists`, `create_symlink`, `ls_with_ext` |

## Quick start

```python
import os
from grind import scaffold, install, builder
from grind.config import load_grind

scaffold.create("com.example", "HelloWorld")   # writes ./HelloWorld/
os.chdir("HelloWorld")

grind = load_grind()                  # reads grind.yml
install.execute_install(grind)        # jars into libs/, writes grind.lock
builder.execute_build(grind, builder.BuildTarget.INCLUDE_JAR, "")
# -> build/HelloWorld.jar
```

A fat jar with every dependency jar merged in:

```python
from grind.uberjar import FatJarConfig, build_fat_jar

build_fat_jar(FatJarConfig(
    output_jar="build/HelloWorld.jar",
    classes_dir="target",
    libs_dir="libs",
    main_class="com.example.HelloWorld",
    group_id="com.example",
    artifact_id="HelloWorld",
))
```

Service files under `META-INF/services/` and Spring resources are concatenated
across jars; jar signature files and the dependency manifests are dropped.

## grind.yml

```yaml
project:
  groupId: "com.example"
  artifactId: "HelloWorld"
  version: "1.0.0"
  name: "My App"
  description: "Update me!"

  dependencies:
    - groupId: "junit"
      artifactId: "junit"
      version: "4.13.2"
      scope: "test"

  tasks:
    clean: "rm -rf target/"

  profiles:
    dev:
      flags: ["-g"]
      envs:
        APP_ENV: "dev"
```

`get_run_args(grind, args)` treats the first argument as a profile name: when
that profile has flags or environment variables they are returned and the
argument is consumed; otherwise every argument is kept.

## Dependency resolution

Dependencies with `test` scope are not resolved. Version collisions are
settled by "newest wins" using Maven-style ordering, for example
`1.0-SNAPSHOT < 1.0-RC1 < 1.0 = 1.0.0`. Versions that are ranges or still hold
`${...}` placeholders are dropped. While the dependencies in `grind.yml` equal
the ones recorded in `grind.lock`, `execute_install` downloads the locked set
without resolving again.

```python
from grind.util import compare_maven_versions

compare_maven_versions("1.0-RC1", "1.0")    # -1
compare_maven_versions("1.0.0", "1.0")      # 0
compare_maven_versions("2.0", "1.9.9")      # 1
```

Adding a dependency looks it up on Maven Central; without `@version` the
published release is used:

```python
from grind.manage import execute_add
execute_add(grind, ["com.google.code.gson/gson@2.10.1"])
```

## Integrity manifests

```python
from grind.integrity import write_integrity_file, validate_integrity

write_integrity_file("some/dir")     # some/dir/integrity.json
validate_integrity("some/dir")       # raises IntegrityError on a mismatch
```

## Tests with TestTube

`grind.testrunner.run_tests` compiles the project and its tests and runs them
with the TestTube plugin found in `plugins/TestTube/`. If the plugin is
missing, it is downloaded from the archive URL given in the
`GRIND_TEST_PLUGIN_URL` environment variable; the plugin directory must pass
its integrity check before tests run.

## JDK management

`grind.jdk.use("21")` downloads the matching JDK into `~/.grind/jdks/v21`,
points `~/.grind/jdks/current` at its `bin/` and adds a marked PATH block to
`~/.bashrc` (backing it up to `~/.bashrc.bak` first). `grind.jdk.remove()`
cuts that block out again and keeps the downloads. `list_releases()` and
`current()` report what is available and what is in use.
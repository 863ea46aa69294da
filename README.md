# kudokit

Helpers for working with KUDO operators from Python: reading and writing
operator repository indexes, managing the local repositories file,
downloading from a repository, checking the health of resources and plans,
and querying operators, operator versions and instances held in a
clientset. Kubernetes objects are handled as plain mappings with `kind`,
`metadata`, `spec` and `status` keys.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Repository configuration

`kudokit.repo.config` holds the `Configuration`, `Repositories`,
`Metadata` and `Maintainer` dataclasses.

```python
from kudokit.repo.config import Configuration, load_repositories, new_repositories

repos = new_repositories()          # only the default "community" repository
repos.add(Configuration(name="local", url="http://localhost:8080"))
repos.set_context("local")          # LookupError if no such repository
repos.write_file("repositories.yaml")

loaded = load_repositories("repositories.yaml")
print(loaded.current_configuration().url)
```

`load_repositories` raises `FileNotFoundError` when the file is missing,
suggesting that `kudo init` be run first, and `ValueError` when the file is
not a valid mapping. `Repositories.remove(name)` drops every repository of
that name and returns whether any was removed.
`configuration_from_settings(repository_file, repo_name)` falls back to the
defaults when the file cannot be read and raises `LookupError` when the
repository is unknown.

## Repository index

```python
from kudokit.repo.index import parse_index_file

with open("index.yaml", "rb") as fh:
    index = parse_index_file(fh.read())

latest = index.get_by_name_and_version("kafka", "")
print(latest.version, latest.urls)
```

`parse_index_file` requires an `apiVersion` and sorts every operator's
versions by semantic version, newest first (versions that do not parse sort
last), so an empty version returns the most recent release. A missing
operator or version raises `LookupError`.

To build an index, start from `new_index_file(generated)` and add entries
with `IndexFile.add_package_version`, which raises `ValueError` for a
missing or duplicate version. `to_package_version(operator, digest, url)`
turns an operator description (a mapping or an object with `name`,
`version`, `description`, `maintainers` and `appVersion`/`app_version`)
into an entry whose URL is `<url>/<name>-<version>.tgz`, with
`http://localhost/` when no URL is given; `map_packages` does the same for
`(operator, digest)` pairs. `IndexFile.to_yaml`, `write` and `write_file`
serialise the index.

## Downloading from a repository

```python
from kudokit.repo.client import client_from_settings

client = client_from_settings("repositories.yaml", "community")
index = client.download_index_file()
archive = client.get_package_reader("kafka", "")   # io.BytesIO
```

`RepositoryClient(config, fetch)` accepts any function that takes a URL and
returns bytes; without one it uses `urllib`. Network failures surface as
`ConnectionError`. `get_operator_version_dependencies` lists the names in an
operator version's `spec.dependencies`.

## Health checks

`kudokit.health.is_healthy(client, obj)` raises `HealthError` saying why a
StatefulSet, Deployment, Job or Instance is not healthy; other kinds are
healthy. For an Instance, `client.get("planexecutions", namespace, name)`
must return the active plan execution, which must be in state `COMPLETE`.
`is_step_healthy`, `is_phase_healthy` and `is_plan_healthy` return booleans
for plan execution status mappings.

## Cluster queries

`kudokit.cluster.KudoClient` wraps a clientset offering `create`, `get`,
`list` and `patch`, such as the bundled `InMemoryClientset`. It reports
whether an operator or instance is installed, returns instances and
operator versions (or `None` when missing), lists instance names and
installed operator versions, installs objects, and merge-patches an
instance's operator version and parameters with `update_instance`. Missing
objects raise `NotFoundError`; duplicates raise `AlreadyExistsError`.

## Smaller helpers

- `kudokit.helpers`: `ask_for_confirmation` (empty answer means yes),
  `sort_directory_content` (numeric names, highest first),
  `pos_string`, `contains_string`.
- `kudokit.template.parse_kubernetes_objects` splits YAML on `---` and
  returns the objects, each of which must have `apiVersion` and `kind`.
- `kudokit.labels`: label and annotation key constants and `string_value`.
- `kudokit.webhook.add_to_manager` calls registered setup functions with a
  manager.
- `kudokit.version.get()` returns an `Info` record with version, commit,
  build date, Python version, implementation and platform. On unstamped
  builds the version comes from `KUDO_DEV_VERSION`, or `dev`.

## What this package does not do

There is no command-line tool. Nothing here talks to a real Kubernetes API
server: `KudoClient` works only with a clientset you supply or with
`InMemoryClientset`. It does not read operator package archives or compute
their digests, so an index is built from operator descriptions and digests
you provide.
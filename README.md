# lwskit

`lwskit` is a toolkit for LeaderWorkerSet objects. In a LeaderWorkerSet, each group
is one leader pod plus a number of worker pods. The toolkit has these parts:

- **`lwskit.api`** has the resource types of the `leaderworkerset.x-k8s.io/v1` API
  group:
  - `LeaderWorkerSet` and `LeaderWorkerSetList`
  - the spec, template, rollout strategy, network and subgroup policies, and status
  - the policy enums
  - the label, annotation and environment-variable keys (for example
    `SET_NAME_LABEL_KEY`, `LWS_LEADER_ADDRESS`, `LWS_GROUP_SIZE`)
  - the group, version, kind and resource helpers `GroupVersion`, `GroupVersionKind`,
    `GroupVersionResource` and `GroupResource`
- **`lwskit.applyconfig`** and **`lwskit.apply`** have apply configurations. These are
  builders that record only the fields you set. They render those fields as a
  JSON-shaped dictionary.
- **`lwskit.chat`** is a command-line chat client for the completion endpoint of a
  llama.cpp server.
- **`lwskit.blobserver`** is a small HTTP server that serves model blobs by hash.
- **`lwskit.leader`** runs on a group's leader. It starts `llama-server` and uses the
  group's workers as RPC backends.

It runs on Python 3.10 or later. It needs nothing outside the standard library.

## Installation

```
pip install lwskit
```

## Building a LeaderWorkerSet apply configuration

```python
from lwskit.apply import leader_worker_set
from lwskit.applyconfig import (
    leader_worker_set_spec,
    leader_worker_template,
    rollout_strategy,
    rolling_update_configuration,
    sub_group_policy,
)

config = (
    leader_worker_set("my-lws", "default")
    .with_labels({"app": "inference"})
    .with_spec(
        leader_worker_set_spec()
        .with_replicas(3)
        .with_leader_worker_template(
            leader_worker_template()
            .with_size(4)
            .with_worker_template({"spec": {"containers": [{"name": "worker", "image": "busybox"}]}})
            .with_sub_group_policy(sub_group_policy().with_sub_group_size(2))
        )
        .with_rollout_strategy(
            rollout_strategy().with_rolling_update_configuration(
                rolling_update_configuration().with_max_unavailable(1).with_max_surge("10%")
            )
        )
    )
)

manifest = config.to_dict()
```

`leader_worker_set(name, namespace)` fills in the name and namespace. It also sets
the kind to `LeaderWorkerSet` and the API version to `leaderworkerset.x-k8s.io/v1`.

Every `with_*` method returns the builder it was called on, so calls can be chained.
What happens when you call one again depends on the field:

- For a single value, the last call wins.
- `with_conditions`, `with_owner_references` and `with_finalizers` append to what is
  already there.
- `with_labels` and `with_annotations` merge their entries in.

Wrong types raise `TypeError`. Unknown policy values raise `ValueError`. A `None`
passed to one of the appending methods also raises `ValueError`.

The status has its own builder, `lwskit.apply.leader_worker_set_status()`.

`lwskit.apply.for_kind` gives you a fresh, empty apply configuration for a kind of
the API group. It returns `None` for any other kind:

```python
from lwskit.api import GROUP_VERSION
from lwskit.apply import for_kind

template = for_kind(GROUP_VERSION.with_kind("LeaderWorkerTemplate"))
```

## Working with the resource types

```python
from lwskit.api import leader_worker_set_from_dict, resource

lws = leader_worker_set_from_dict(manifest)
print(lws.spec.replicas, lws.spec.leader_worker_template.size)
print(lws.to_dict())

print(resource("leaderworkersets"))  # leaderworkersets.leaderworkerset.x-k8s.io
```

`leader_worker_set_from_dict` fills unset fields with the API's defaults:

| Field | Default |
| --- | --- |
| replicas | 1 |
| size | 1 |
| restart policy | `RecreateGroupOnPodRestart` |
| startup policy | `LeaderCreated` |
| rollout strategy | `RollingUpdate` |

A mismatched `apiVersion` or `kind` raises `ValueError`.

## Command-line tools

### Chat with a llama.cpp server

```
lwskit-chat --llm-endpoint http://127.0.0.1:8080 --user "Hello"
```

If `--llm-endpoint` is not given, the endpoint comes from the `LLM_ENDPOINT`
environment variable. If that is not set either, it is `http://127.0.0.1:8080`.

`--user` gives the first prompt. After that, the tool shows `> ` and reads prompts
from standard input until end of file. Each prompt is wrapped in a chat template with
a fixed system prompt. The reply is streamed to standard output as it arrives.

`-v 2` turns on debug logging. A failed request ends the program with exit status 1.

To use the client from Python, see `LlamaCppClient.complete`,
`LlamaCppClient.stream_completion` and `run_chat`.

### Serve model blobs

```
lwskit-blobserver
```

The server listens on port 9999 on all interfaces. It serves files from
`~/.cache/blobserver/blobs`. Requests are answered as follows:

| Request | Response |
| --- | --- |
| `GET /<hash>` for a file that exists | the file with that name |
| `GET /<hash>` for a blob not in the cache | 404 |
| any other method on `/<hash>` | 405 |
| any deeper path | 404 |

To send a missing blob to another location instead of returning 404, give a redirect
with `--redirect HASH=URL`. The option can be repeated. The server answers such a
request with a 302.

From Python, `make_server(address, base_dir)` returns the server. Its `redirects`
mapping holds the same kind of entries.

### Start llama.cpp on a group leader

```
lwskit-leader --llm-model /models/model.gguf -- --ctx-size 4096
```

The tool does the following:

1. It reads the group size from `LWS_GROUP_SIZE` (default 1) and the leader's address
   from `LWS_LEADER_ADDRESS`.
2. It works out the host names of workers 1 to size−1.
3. It resolves each host name to an IP address. A failed lookup is retried up to 10
   times, 3 seconds apart.
4. It starts `/llama-server` with `--model`, `--host 0.0.0.0` and `--rpc`. The `--rpc`
   value lists the workers as `IP:50052`.

Options:

- `--lws-size` overrides the group size.
- `--llm-model` defaults to the `LLM_MODEL` environment variable.
- Arguments after `--` are passed on to the server.

The tool exits with status 1 in any of these cases:

- a lookup still fails after the retries
- `llama-server` cannot be started
- `llama-server` exits with an error

## What this package does not do

`lwskit` does not talk to a cluster. It has no controller that reconciles
LeaderWorkerSets into pods and stateful sets. It has no API client and no webhooks.

The resource types and apply configurations only build and read plain dictionaries.
To create or apply objects, hand those dictionaries to whatever Kubernetes client you
use.
# kubealertbot

A library of building blocks for a Telegram bot that reports Grafana alerts
about a Kubernetes cluster: alert parsing, deployment status formatting,
dashboard image cropping, a small Telegram Bot API client, kubeconfig
loading and logger setup.

## Installation

```
pip install .
```

## Modules

### `kubealertbot.domain`

- `parse_alerts(payload)` decodes a Grafana webhook body (a JSON array, as
  `str` or `bytes`) into a list of `Alert` objects. A JSON `null` gives an
  empty list; anything other than an array raises `ValueError`.
- `Alert.from_dict(data)` builds one alert. Field names are matched exactly
  first and then without regard to case; `startsAt` and `endsAt` are parsed
  as RFC 3339 timestamps. Fields of the wrong type raise `ValueError`.
- `str(alert)` gives the text sent to a chat:

  ```
  Alert: <alertname>🚨
  	Pod: <pod>
  	Problem: <summary>
  ```

- `Alert.to_db(namespace)` returns an `AlertDB` with the namespace, status
  and labels.
- `Labels.from_dict` / `Labels.to_dict` convert the `alertname`,
  `grafana_folder` and `pod` labels.
- `ContainerStatus`, `PodStatus` and `DeployStatus` hold a snapshot of a
  deployment: its condition, and CPU (cores) and memory (MB) usage per pod
  and per container.

### `kubealertbot.render`

- `pretty_print_status(deploys)` turns a sequence of `DeployStatus` into
  Markdown text, numbering the deployments and listing pods and containers
  with usage printed to three decimals.
- `numbered_list(items)` gives lines `1) first`, `2) second`, ...
- `crop_top_pixels_png(data, crop_y)` removes the top `crop_y` rows of an
  image and returns RGBA PNG bytes; it raises `ValueError` if the data is not
  an image or the crop would leave nothing.
- `fetch_grafana_dashboard(address, token)` downloads the rendered cluster
  overview dashboard (last hour) from Grafana at `host:port`, sending the
  token as a bearer token, and crops its 130-pixel header.

```python
from kubealertbot.domain import ContainerStatus, DeployStatus, PodStatus
from kubealertbot.render import pretty_print_status

pod = PodStatus({"app": ContainerStatus(0.25, 64.0)}, total_cpu=0.25, total_mem=64.0)
print(pretty_print_status([DeployStatus("web", "Available", {"web-1": pod})]))
```

### `kubealertbot.telegram_api`

`TelegramClient(token)` checks the token with `getMe` when created and then
offers `send_message`, `edit_message_text`, `answer_callback_query`,
`send_photo`, `get_updates` and `iter_updates` (endless long polling that
pauses three seconds after a failed poll). Refused requests raise
`TelegramError`. Incoming events are returned as `Update`, `Message` and
`CallbackQuery` objects. `reply_keyboard`, `inline_keyboard` and
`force_reply` build reply markup.

```python
from kubealertbot.telegram_api import TelegramClient, reply_keyboard

client = TelegramClient("token")
client.send_message(12345, "hello", reply_markup=reply_keyboard([["Status"]]))
```

### `kubealertbot.kube_config`

- `load_kubeconfig(path=None, context=None)` reads a kubeconfig file
  (default: first entry of `KUBECONFIG`, else `~/.kube/config`) and returns
  a `ClusterConfig` for the given or current context.
- `load_incluster_config(root=...)` uses the pod's mounted service account
  and the `KUBERNETES_SERVICE_HOST` / `KUBERNETES_SERVICE_PORT` variables.
- `load_config()` tries `KUBECONFIG`, then the in-cluster account, then
  `~/.kube/config`, and raises `ValueError` if none is found.
- `ClusterConfig.ssl_context()` builds the TLS settings for an HTTP client;
  `ClusterConfig.disable_tls_verification()` turns certificate checks off.

### `kubealertbot.logger`

`setup_logger(level)` configures the `kubealertbot` logger to write to
standard output: `LogLevel.ENV_LOCAL` gives `key=value` text at DEBUG,
`LogLevel.ENV_DEV` JSON at DEBUG, and `LogLevel.ENV_PROD` JSON at INFO.
`JsonFormatter` can also be used on its own.

## What the package does not do

The package has no command to run and no running bot: there is no chat
dialogue or button handling, no HTTP endpoint that receives alerts, no
database that stores them, and no client that lists, scales, restarts or
rolls back workloads through the Kubernetes API. `kube_config` only reads
the connection settings; the pieces above must be put together by your own
code.

## Running the tests

```
pip install .[test]
pytest
```
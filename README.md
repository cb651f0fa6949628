# webservpy

A small HTTP server configured with nginx-style `.conf` files. It reads the
configuration, checks it for syntax errors, builds one virtual server per
`server { ... }` block and serves static files on the configured addresses.
It answers `GET` and `DELETE` requests and supports per-location roots,
index files, `try_files`, custom error pages and a check that CGI scripts
are only served from `cgi-bin/`.

## Installation

```
pip install .
```

## Running

```
webservpy server.conf
```

The command takes exactly one argument; otherwise it prints a usage line and
exits with status 1. The file name must end in `.conf`. Configuration errors
are printed to standard error and the command exits with status 1. On
success it prints `Configuration loaded successfully` and serves until
interrupted with Ctrl-C.

Every response is logged to `access.log` in the working directory.
Bind failures and duplicate addresses are logged to the server's
`error_log` file.

## Configuration

```
server {
    listen 127.0.0.1:8080;
    server_name example.com;
    root ./www;
    index /index.html;
    client_max_body_size 1000000;
    error_log error.log;
    access_log access.log;
    error_page 404 /errors/404.html;

    location / {
        methods GET DELETE;
        try_files $uri $uri.html 404;
    }

    location /cgi-bin {
        methods GET;
        cgi_ext .py /usr/bin/python3;
    }
}
```

Server directives: `listen`, `server_name`, `root`, `index`,
`client_max_body_size`, `access_log`, `error_log`, `error_page`, `location`.

Location directives: `root`, `index`, `methods` (`GET`, `POST`, `DELETE`),
`try_files`, `autoindex`, `upload_dir`, `return`, `cgi_ext`.

- Every directive line must end in `;`; block lines (`server {`,
  `location ... {`, `}`) do not. Unknown directives are rejected.
- `listen` without a port uses port 7979; `localhost` is read as
  `127.0.0.1`. The address must be a valid IPv4 address when the server
  starts.
- Each directive other than `error_page`, `location` and `cgi_ext` may
  appear only once per block.
- `try_files` entries start with `$uri` or are a status code.
- Lines starting with `#` are comments, and text after `#` on a line is
  dropped.

## How requests are answered

A request path is matched exactly against the location paths. If the
location does not list the request method, the answer is
`405 Method Not Allowed`. The file is looked up under the location's root
(or the server's root); a request for a directory tries each index name in
turn. When no location matches, the `try_files` list of the `/` location is
used, ending in the status code it names. Files without an extension are
also tried with `.html`, `.txt` and the configured CGI extensions.

`DELETE` removes a regular file only if it lies under the location's root
and is writable.

Error responses use the server's `error_page` file when it can be read,
otherwise a built-in page. Every response closes the connection.

## Using it from Python

```python
from webservpy.check_config import load_config
from webservpy.webserver import WebServer

confs = load_config("server.conf")
with WebServer(confs) as server:
    server.open_sockets()
    server.serve_forever()
```

`load_config` raises `webservpy.helpers.ConfigError` when the file is
invalid. `WebServer.close()` stops `serve_forever()` and closes all sockets.

Lower-level pieces are usable on their own:
`webservpy.http_request.HttpRequest().parse(text)` parses request text,
`webservpy.webserver.Responder(conf, request).respond()` returns the
response bytes for a parsed request, and `webservpy.responses` builds
responses (`create_http_response`, `create_error_response`).

## What it does not do

- CGI scripts are not run. A file with a CGI extension inside `cgi-bin/` is
  sent as it is; outside `cgi-bin/` it is refused with `403 Forbidden`.
- `POST` is accepted in `methods`, but such requests get no response and the
  connection is closed. There are no uploads.
- `autoindex`, `upload_dir`, `return` and `client_max_body_size` are read
  and checked but have no effect on how requests are served.
- There is no keep-alive, no directory listing and no HTTPS.
"""PortalLab: simulated captive-portal gateway for CaptiveDetect testing.

Serves the detect page the way a real network would in each situation:

  * open     → 200 with the literal "Success" page
  * captive  → 3xx to the gateway's /login page (status configurable)
  * broken   → 200 with some unrelated page and no redirect

Map the detect host to this machine in /etc/hosts and run it on port 80,
or route an httpx client into it with ``httpx.WSGITransport``.
"""

from flask import (
    Flask, request, render_template_string, redirect, url_for, abort,
)

app = Flask(__name__)
app.config.update(PORTAL_MODE="open", REDIRECT_STATUS=302)

MODES = ("open", "captive", "broken")
REDIRECT_STATUSES = (301, 302, 303, 307, 308)


# ── Shared HTML layout ──────────────────────────────────────────

_LAYOUT = """<!DOCTYPE html>
<html><head><title>PortalLab — {{ title }}</title>
<style>
body{font-family:monospace;background:#111;color:#0f0;max-width:900px;margin:0 auto;padding:2rem}
a{color:#0ff}h1{color:#f00}h2{color:#ff0}
form{background:#1a1a1a;padding:1rem;border:1px solid #333;margin:1rem 0}
input{background:#222;color:#0f0;border:1px solid #444;padding:0.4rem;width:60%}
button{background:#900;color:#fff;border:none;padding:0.5rem 1rem;cursor:pointer}
</style></head>
<body>
<h1>PortalLab</h1>
<h2>{{ title }}</h2>
{{ content|safe }}
</body></html>
"""

_SUCCESS = "<HTML><BODY>Success</BODY></HTML>"


def page(title, content):
    return render_template_string(_LAYOUT, title=title, content=content)


# ══════════════════════════════════════════════════════════════════
#  Detect page: what the probe GETs
# ══════════════════════════════════════════════════════════════════

@app.route("/")
def detect():
    mode = app.config["PORTAL_MODE"]

    if mode == "captive":
        target = url_for("login", _external=True)
        return redirect(target, code=app.config["REDIRECT_STATUS"])

    if mode == "broken":
        return page("Welcome", "<p>Unexpected content from an upstream proxy.</p>")

    return _SUCCESS


# ══════════════════════════════════════════════════════════════════
#  Login page: accepting the terms opens the network
# ══════════════════════════════════════════════════════════════════

@app.route("/login", methods=["GET", "POST"])
def login():
    if request.method == "POST":
        app.config["PORTAL_MODE"] = "open"
        return page("Connected", "<p>You are now online.</p>")

    return page("Guest Wi-Fi", """
    <form action="/login" method="POST">
        <label>Room number:</label><br>
        <input type="text" name="room" value="">
        <button type="submit">Accept terms</button>
    </form>
    """)


# ══════════════════════════════════════════════════════════════════
#  Lab control
# ══════════════════════════════════════════════════════════════════

@app.route("/mode/<mode>", methods=["GET", "POST"])
def set_mode(mode):
    if mode not in MODES:
        abort(404)
    status = request.values.get("status", type=int)
    if status is not None:
        if status not in REDIRECT_STATUSES:
            abort(400)
        app.config["REDIRECT_STATUS"] = status
    app.config["PORTAL_MODE"] = mode
    return {"mode": mode, "redirect_status": app.config["REDIRECT_STATUS"]}


# ══════════════════════════════════════════════════════════════════
#  Main
# ══════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    print("\n  PortalLab starting on http://0.0.0.0:80\n")
    app.run(host="0.0.0.0", port=80, debug=True)

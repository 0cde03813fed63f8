"""
aesgcm_envelope: Live Demo: both key custody models
====================================================
Run:  python examples/demo.py

Encrypts and decrypts a real message with an in-memory key and with a
key held in a protected store, printing envelope sizes and timings.
"""

import sys, os, time, base64, logging
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from aesgcm_envelope import (
    AuthenticatedCipher,
    InMemoryKeyStore,
    create_keystore_key,
    generate_base64_key,
    AuthenticationFailedError,
    KeyAccessError,
)

LINE = "═" * 70
MSG  = "hello world"

def header(name):
    print(f"\n{LINE}")
    print(f"  {name}")
    print(LINE)

def ok(label, value=""):
    print(f"  ✓  {label}{f': {value}' if value else ''}")

logging.basicConfig(level=logging.INFO, format=' %(name)s: %(message)s')

# ── EXPLICIT KEY ─────────────────────────────────────────────────────────────
header("EXPLICIT KEY: base64 key held in process memory")
encoded = generate_base64_key(256)
t0  = time.perf_counter()
c   = AuthenticatedCipher.from_base64_key(encoded)
env = c.encrypt(MSG)
pt  = c.decrypt(env)
elapsed = time.perf_counter() - t0
ok("Key size",   "256 bits")
ok("Envelope",   env)
ok("Decoded",    f"{len(base64.b64decode(env))} bytes (iv=12 + data + tag=16)")
ok("Round-trip", f"{elapsed*1000:.2f} ms")
ok("Decrypted",  pt)
ok("Fresh IV",   str(c.encrypt(MSG) != env))

raw = bytearray(base64.b64decode(env))
raw[15] ^= 0x01
try:
    c.decrypt(base64.b64encode(bytes(raw)).decode())
except AuthenticationFailedError as exc:
    ok("Tamper detected", str(exc))

# ── OPAQUE HANDLE ────────────────────────────────────────────────────────────
header("OPAQUE HANDLE: non-exportable key inside a protected store")
store = InMemoryKeyStore()
create_keystore_key("demo-key", 256, store=store, require_auth=True)
try:
    AuthenticatedCipher.from_opaque_handle("demo-key", store)
except KeyAccessError as exc:
    ok("Locked", str(exc))
store.authenticate("demo-key")
t0  = time.perf_counter()
c   = AuthenticatedCipher.from_opaque_handle("demo-key", store)
env = c.encrypt(MSG)
pt  = c.decrypt(env)
elapsed = time.perf_counter() - t0
ok("Cipher",     repr(c))
ok("Envelope",   env)
ok("Round-trip", f"{elapsed*1000:.2f} ms")
ok("Decrypted",  pt)

print(f"\n{LINE}\n")

#!/usr/bin/env python3
"""
signed_link.py - Put a signed token in a URL and check it later

The server keeps nothing: everything needed to trust the link is in the token.

Run: python signed_link.py
"""

from urllib.parse import parse_qs, quote, urlparse

import sigil

SECRET = "correct horse battery staple"

# 1. Sign the data that should travel with the link
token = sigil.sign({"user": "42", "download": "report.pdf"}, SECRET)
link = f"https://example.com/download?t={quote(token)}"
print(f"Link: {link}")

# 2. Later, read the token back from the URL and verify it
received = parse_qs(urlparse(link).query)["t"][0]
result = sigil.verify(received, SECRET)
print(f"Valid: {result.ok}  Data: {result.data}")

# 3. Anyone holding only the public key can verify too
public_key = sigil.make_keypair(SECRET).public_key
print(f"Valid with public key: {sigil.verify(received, public_key).ok}")

# 4. A tampered link fails
tampered = received.replace("report.pdf", "payroll.xlsx")
print(f"Tampered: {sigil.verify(tampered, SECRET).to_dict()}")

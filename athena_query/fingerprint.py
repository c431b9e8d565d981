# Copyright Amazon.com and its affiliates; all rights reserved. This file is Amazon Web Services Content and may not be duplicated or distributed without permission.
# SPDX-License-Identifier: MIT-0
import hashlib


def fingerprint(query: str) -> str:
    """Return the hex digest used to detect changes to a query between runs
    """
    return hashlib.sha256(query.encode('utf-8')).hexdigest()

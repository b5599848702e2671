# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Rust code generation: type mapping, data types, contract, logic scaffold, and project files."""

# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Detects whether ActionKit runs in development or production mode."""

import os
import sys

if sys.version_info < (3, 11):
    from strenum import StrEnum
else:
    from enum import StrEnum


class EnvVar(StrEnum):
    """Environment variables read by the core."""

    ACTIONKIT_ENV = 'ACTIONKIT_ENV'


class Environment(StrEnum):
    """Modes ActionKit can run in."""

    DEV = 'dev'
    PROD = 'prod'


def get_current_environment() -> Environment:
    """Returns the mode selected by `ACTIONKIT_ENV`.

    Unset or unknown values select production.
    """
    value = os.getenv(EnvVar.ACTIONKIT_ENV)
    if value is None:
        return Environment.PROD
    try:
        return Environment(value)
    except ValueError:
        return Environment.PROD


def is_dev_environment() -> bool:
    return get_current_environment() == Environment.DEV


def is_prod_environment() -> bool:
    return get_current_environment() == Environment.PROD

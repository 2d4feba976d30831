# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
import sys

from .core import FatalError
from .core import main

if __name__ == "__main__":
    try:
        sys.exit(main())
    except FatalError as e:
        print("A fatal error occurred: %s" % e)
        sys.exit(2)

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 mongo-stats-exporter contributors

from .main import main

if __name__ == "__main__":
    main()

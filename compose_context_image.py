#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Compose scene files of text and images into one context image.
"""

import context_canvas.cli


if __name__ == "__main__":
	context_canvas.cli.main()

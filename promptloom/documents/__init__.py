# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""Built-in phrase signatures for common open-source licenses.

Phrases are written the way they appear in headers and license texts; they
are normalized with the tokenizer's rules when the corpus is built, so
punctuation and casing here do not matter.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from .base import Signature

BUILTIN_PHRASES: Dict[str, Tuple[str, ...]] = {
    "Apache": (
        "Licensed to the Apache Software Foundation (ASF) under one or more "
        "contributor license agreements",
        'Licensed under the Apache License, Version 2.0 (the "License")',
        "Apache License Version 2.0, January 2004",
        "SPDX-License-Identifier: Apache-2.0",
    ),
    "MIT": (
        "Permission is hereby granted, free of charge, to any person obtaining a copy",
        "SPDX-License-Identifier: MIT",
    ),
    "BSD": (
        "Redistribution and use in source and binary forms, with or without "
        "modification, are permitted provided that the following conditions are met",
        "SPDX-License-Identifier: BSD-2-Clause",
        "SPDX-License-Identifier: BSD-3-Clause",
    ),
    "ISC": (
        "Permission to use, copy, modify, and/or distribute this software for any "
        "purpose with or without fee is hereby granted",
        "SPDX-License-Identifier: ISC",
    ),
    "GPL": (
        "GNU General Public License as published by the Free Software Foundation",
        "GNU GENERAL PUBLIC LICENSE Version 2, June 1991",
        "GNU GENERAL PUBLIC LICENSE Version 3, 29 June 2007",
        "SPDX-License-Identifier: GPL-2.0-only",
        "SPDX-License-Identifier: GPL-2.0-or-later",
        "SPDX-License-Identifier: GPL-3.0-only",
        "SPDX-License-Identifier: GPL-3.0-or-later",
    ),
    "LGPL": (
        "GNU Lesser General Public License as published by the Free Software Foundation",
        "GNU Library General Public License as published by the Free Software Foundation",
        "GNU LESSER GENERAL PUBLIC LICENSE Version 2.1, February 1999",
        "GNU LESSER GENERAL PUBLIC LICENSE Version 3, 29 June 2007",
        "SPDX-License-Identifier: LGPL-2.1-only",
        "SPDX-License-Identifier: LGPL-2.1-or-later",
        "SPDX-License-Identifier: LGPL-3.0-only",
        "SPDX-License-Identifier: LGPL-3.0-or-later",
    ),
    "AGPL": (
        "GNU Affero General Public License as published by the Free Software Foundation",
        "GNU AFFERO GENERAL PUBLIC LICENSE Version 3, 19 November 2007",
        "SPDX-License-Identifier: AGPL-3.0-only",
        "SPDX-License-Identifier: AGPL-3.0-or-later",
    ),
    "MPL": (
        "This Source Code Form is subject to the terms of the Mozilla Public License",
        "Mozilla Public License Version 2.0",
        "SPDX-License-Identifier: MPL-2.0",
    ),
    "EPL": (
        "made available under the terms of the Eclipse Public License",
        "SPDX-License-Identifier: EPL-2.0",
    ),
    "Boost": (
        "Boost Software License - Version 1.0",
        "SPDX-License-Identifier: BSL-1.0",
    ),
    "Zlib": (
        "In no event will the authors be held liable for any damages arising from "
        "the use of this software",
        "SPDX-License-Identifier: Zlib",
    ),
    "Unlicense": (
        "This is free and unencumbered software released into the public domain",
        "SPDX-License-Identifier: Unlicense",
    ),
    "CC0": (
        "CC0 1.0 Universal",
        "SPDX-License-Identifier: CC0-1.0",
    ),
    "WTFPL": (
        "DO WHAT THE FUCK YOU WANT TO PUBLIC LICENSE",
        "SPDX-License-Identifier: WTFPL",
    ),
}


def builtin_signatures() -> List[Signature]:
    """Return the built-in corpus in declaration order."""
    return [
        Signature.from_text(license, text)
        for license, phrases in BUILTIN_PHRASES.items()
        for text in phrases
    ]


__all__ = ["BUILTIN_PHRASES", "builtin_signatures"]

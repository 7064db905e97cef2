# [`mkdn`] Copyright @[Angelo Gladding][1] 2020-
#
# This program is free software: it is distributed in the hope that it
# will be useful, but *without any warranty*; without even the implied
# warranty of merchantability or fitness for a particular purpose. You
# can redistribute it and/or modify it under the terms of the @@[GNU's
# Not Unix][2] %[Affero General Public License][3] as published by the
# @@[Free Software Foundation][4], either version 3 of the License, or
# any later version.
#
# *[GNU]: GNU's Not Unix
#
# [1]: https://angelogladding.com
# [2]: https://gnu.org
# [3]: https://gnu.org/licenses/agpl
# [4]: https://fsf.org

"""Markdown Extra to HTML."""

from setuptools import setup

setup(name="mkdn",
      version="0.1.0",
      description="Markdown Extra to HTML",
      license="AGPLv3+",
      packages=["mkdn"],
      python_requires=">=3.7",
      install_requires=["pygments", "regex", "unidecode"],
      extras_require={"test": ["cssselect", "lxml", "pytest"]})

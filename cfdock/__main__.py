#   Licensed under the Apache License, Version 2.0 (the "License"); you may
#   not use this file except in compliance with the License. You may obtain
#   a copy of the License at
#
#        http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
#   WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
#   License for the specific language governing permissions and limitations
#   under the License.
#

"""Deploy a minimal Cloud Foundry on Docker
through a BOSH director using the Docker CPI"""

import sys

from cliff.app import App
from cliff.commandmanager import CommandManager

import cfdock


class CfdockApp(App):

    def __init__(self):
        super(CfdockApp, self).__init__(
            description=__doc__,
            version=cfdock.__version__,
            command_manager=CommandManager('cfdock'),
            deferred_help=True,
            )


def main(argv=sys.argv[1:]):
    myapp = CfdockApp()
    # a bare invocation runs the full deployment
    return myapp.run(argv or ['full'])


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))

# Licensed under the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License. You may obtain
# a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations
# under the License.

import os
import tempfile

from cfdock import constants
from cfdock import runner
from cfdock.utils import common


def _check(cmd, log):
    cmd_stdout, cmd_stderr, returncode = runner.BaseRunner.execute(cmd, log)
    if returncode != 0:
        raise runner.CommandError(cmd, returncode, cmd_stderr)


def bosh_cli_url(platform=None):
    return constants.BOSH_CLI_URL.format(
        version=constants.BOSH_CLI_VERSION,
        platform='darwin' if common.is_darwin(platform) else 'linux')


def cf_cli_url(platform=None):
    return constants.CF_CLI_URL.format(
        release='macosx64-binary' if common.is_darwin(platform)
        else 'linux64-binary')


def install_bosh_cli(platform=None, install_dir=constants.INSTALL_DIR,
                     log=None):
    log = log or common.configure_logging(__name__)
    log.info('Installing BOSH CLI...')
    tmp = os.path.join(tempfile.gettempdir(), 'bosh')
    _check(['curl', '-sL', bosh_cli_url(platform), '-o', tmp], log)
    os.chmod(tmp, 0o755)
    _check(['sudo', 'mv', tmp, os.path.join(install_dir, 'bosh')], log)
    log.info('BOSH CLI installed')


def install_cf_cli(platform=None, install_dir=constants.INSTALL_DIR,
                   log=None):
    """Install the cf CLI from the stable v8 package.

    :returns: True when a cf binary was found in the archive and installed.
    :rtype: bool
    """
    log = log or common.configure_logging(__name__)
    log.info('Installing CF CLI...')
    tmpdir = tempfile.gettempdir()
    archive = os.path.join(tmpdir, 'cf-cli.tgz')
    _check(['curl', '-sL', cf_cli_url(platform), '-o', archive], log)
    _check(['tar', '-xzf', archive, '-C', tmpdir], log)

    # The v8 archive ships cf8, older ones a plain cf binary.
    for name in ('cf8', 'cf'):
        binary = os.path.join(tmpdir, name)
        if os.path.isfile(binary):
            _check(['sudo', 'mv', binary, os.path.join(install_dir, 'cf')],
                   log)
            log.info('CF CLI installed')
            return True
    log.warning("Could not find 'cf' binary in extracted archive. "
                "Please install manually.")
    return False

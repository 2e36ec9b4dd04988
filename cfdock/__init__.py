# Licensed under the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License. You may obtain
# a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations
# under the License.

'''Stable library interface to deploying Cloud Foundry on Docker.'''

import pbr.version

from cfdock.builder import base
from cfdock.builder import cf as cf_builder
from cfdock.builder import director as director_builder
from cfdock import runner
from cfdock.utils import common
from cfdock import workspace

__version__ = pbr.version.VersionInfo('cfdock').version_string()


def full(settings, log_level=None, log_file=None):
    """Deploy the BOSH director and then Cloud Foundry on it.

    :param dict settings: Deployment settings, see
                          cfdock.utils.common.load_settings.
    :param int log_level: Optional verbosity, 1 (warning) to 3 (debug).
    :param str log_file: Optional file to log to.

    :returns: connection info text for the deployed platform.
    :rtype: str
    """
    director(settings, log_level=log_level, log_file=log_file)
    return cf(settings, log_level=log_level, log_file=log_file)


def director(settings, log_level=None, log_file=None):
    """Deploy the BOSH director with the Docker CPI.

    Checks prerequisites, prepares the workspace and Docker network,
    creates the director, pushes the cloud and runtime configs and uploads
    the stemcell cf-deployment asks for.

    :param dict settings: Deployment settings.
    :param int log_level: Optional verbosity, 1 (warning) to 3 (debug).
    :param str log_file: Optional file to log to.
    """
    log = common.configure_logging(__name__, log_level, log_file)
    builder = director_builder.DirectorBuilder(settings, log=log)
    builder.apply()


def cf(settings, log_level=None, log_file=None):
    """Deploy Cloud Foundry on an existing director.

    :returns: connection info text for the deployed platform.
    :rtype: str
    """
    log = common.configure_logging(__name__, log_level, log_file)
    builder = cf_builder.CFBuilder(settings, log=log)
    return builder.apply()


def destroy(settings, log_level=None, log_file=None):
    """Delete the platform, the director, their containers and network.

    Every step is best effort, a partially deployed environment is torn
    down as far as it exists.
    """
    log = common.configure_logging(__name__, log_level, log_file)
    builder = director_builder.DirectorBuilder(settings, log=log)
    builder.destroy()


def status(settings, log_level=None, log_file=None):
    """Report network, director, deployment, VM and container state.

    :returns: (component, name, state) rows
    :rtype: list
    """
    log = common.configure_logging(__name__, log_level, log_file)
    builder = base.BaseBuilder(settings, log=log)
    return builder.status()


def info(settings, log_level=None, log_file=None):
    """Save and return the platform connection info.

    :rtype: str
    """
    log = common.configure_logging(__name__, log_level, log_file)
    builder = cf_builder.CFBuilder(settings, log=log)
    return builder.show_info()


def env(settings):
    """Environment variables targeting the deployed director.

    :rtype: dict
    """
    ws = workspace.Workspace(settings['workspace'])
    return ws.director_env(settings['director_ip'])


def credhub_env(settings, log_level=None, log_file=None):
    """Environment variables for the credhub CLI against the director.

    :rtype: dict
    """
    log = common.configure_logging(__name__, log_level, log_file)
    return base.BaseBuilder(settings, log=log).credhub_env()


def password(settings, kind='cf'):
    """Admin password of the platform ('cf') or the director ('director').

    :returns: the password, or None when it can not be found.
    """
    ws = workspace.Workspace(settings['workspace'])
    try:
        if kind == 'director':
            return ws.director_secret('/admin_password')
        return ws.cf_secret('/cf_admin_password')
    except workspace.MissingStateError:
        return None


def login(settings, log_level=None, log_file=None):
    log = common.configure_logging(__name__, log_level, log_file)
    cf_builder.CFBuilder(settings, log=log).login()


def setup_space(settings, org='dev-org', space='dev', log_level=None,
                log_file=None):
    """Log in as admin, then create and target an org and space."""
    log = common.configure_logging(__name__, log_level, log_file)
    cf_builder.CFBuilder(settings, log=log).setup_space(org, space)


def _director(settings, log):
    builder = base.BaseBuilder(settings, log=log)
    builder.load_director_env()
    return builder.bosh


def vms(settings, vitals=False, deployment=False, log_level=None,
        log_file=None):
    log = common.configure_logging(__name__, log_level, log_file)
    return _director(settings, log).vms(vitals=vitals, deployment=deployment)


def ssh(settings, instance, log_level=None, log_file=None):
    log = common.configure_logging(__name__, log_level, log_file)
    return _director(settings, log).ssh(instance)


def logs(settings, instance, follow=True, log_level=None, log_file=None):
    log = common.configure_logging(__name__, log_level, log_file)
    return _director(settings, log).logs(instance, follow=follow)


def tasks(settings, recent=10, log_level=None, log_file=None):
    log = common.configure_logging(__name__, log_level, log_file)
    return _director(settings, log).tasks(recent=recent)


def cancel_task(settings, task_id, log_level=None, log_file=None):
    log = common.configure_logging(__name__, log_level, log_file)
    return _director(settings, log).cancel_task(task_id)


def recreate(settings, log_level=None, log_file=None):
    """Recreate every VM of the platform deployment."""
    log = common.configure_logging(__name__, log_level, log_file)
    return _director(settings, log).recreate()


def containers(settings, log_level=None, log_file=None):
    log = common.configure_logging(__name__, log_level, log_file)
    r = runner.DockerRunner(log=log)
    return r.show_containers(settings['network_name'])


def prune(settings, log_level=None, log_file=None):
    """Remove stopped containers, unused images and unused volumes."""
    log = common.configure_logging(__name__, log_level, log_file)
    r = runner.DockerRunner(log=log)
    r.prune()

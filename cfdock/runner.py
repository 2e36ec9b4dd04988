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

import jmespath
import json
import os
import shutil
import subprocess
import tenacity

from cfdock import constants
from cfdock.utils import common


def redacted(cmd, secrets=None):
    '''Command line for display, with secret arguments masked.'''
    secrets = secrets or ()
    return ' '.join('****' if arg in secrets else arg for arg in cmd)


class CommandError(Exception):

    def __init__(self, cmd, returncode, stderr='', secrets=None):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
        msg = 'Command "%s" failed with exit code %s' % (
            redacted(cmd, secrets), returncode)
        if stderr:
            msg = '%s: %s' % (msg, stderr.strip())
        super(CommandError, self).__init__(msg)


class DirectorNotReady(Exception):
    pass


class BaseRunner(object):
    def __init__(self, cmd, log=None, env=None, cwd=None):
        self.cmd = cmd
        # Leverage pre-configured logger
        self.log = log or common.configure_logging(__name__)
        self.env = env
        self.cwd = cwd

    @staticmethod
    def execute(cmd, log=None, quiet=False, env=None, cwd=None):
        if not log:
            log = common.configure_logging(__name__)
        if not quiet:
            log.debug('$ %s' % ' '.join(cmd))
        subproc = subprocess.Popen(cmd, stdout=subprocess.PIPE,
                                   stderr=subprocess.PIPE, env=env, cwd=cwd)
        cmd_stdout, cmd_stderr = subproc.communicate()
        if not quiet:
            log.debug(cmd_stdout)
            log.debug(cmd_stderr)
        return (cmd_stdout.decode('utf-8'),
                cmd_stderr.decode('utf-8'),
                subproc.returncode)

    @staticmethod
    def execute_interactive(cmd, log=None, env=None, cwd=None, secrets=None):
        if not log:
            log = common.configure_logging(__name__)
        log.debug('$ %s' % redacted(cmd, secrets))
        return subprocess.call(cmd, env=env, cwd=cwd)

    def installed(self):
        return shutil.which(self.cmd) is not None

    def full_env(self):
        if not self.env:
            return None
        env = dict(os.environ)
        env.update(self.env)
        return env

    def run(self, args, quiet=False):
        cmd = [self.cmd] + list(args)
        return self.execute(cmd, self.log, quiet=quiet, env=self.full_env(),
                            cwd=self.cwd)

    def check(self, args):
        '''Run a command capturing its output, raise if it fails.'''
        cmd = [self.cmd] + list(args)
        cmd_stdout, cmd_stderr, returncode = self.execute(
            cmd, self.log, env=self.full_env(), cwd=self.cwd)
        if returncode != 0:
            raise CommandError(cmd, returncode, cmd_stderr)
        return cmd_stdout

    def stream(self, args, secrets=None):
        '''Run a long command attached to the terminal.'''
        cmd = [self.cmd] + list(args)
        return self.execute_interactive(cmd, self.log, env=self.full_env(),
                                        cwd=self.cwd, secrets=secrets)

    def check_stream(self, args, secrets=None):
        returncode = self.stream(args, secrets)
        if returncode != 0:
            raise CommandError([self.cmd] + list(args), returncode,
                               secrets=secrets)


class BoshRunner(BaseRunner):

    def __init__(self, environment=None, deployment=None, bosh_cmd=None,
                 log=None, env=None, cwd=None):
        super(BoshRunner, self).__init__(bosh_cmd or 'bosh', log, env, cwd)
        self.environment = environment
        self.deployment = deployment

    def targeted(self, args, deployment=False):
        cmd = []
        if self.environment:
            cmd.extend(['-e', self.environment])
        if deployment and self.deployment:
            cmd.extend(['-d', self.deployment])
        return cmd + list(args)

    @staticmethod
    def env_args(manifest, state, vars_store, ops_files=None, variables=None):
        args = [manifest,
                '--state=%s' % state,
                '--vars-store=%s' % vars_store]
        for ops in ops_files or []:
            args.extend(['-o', ops])
        for k, v in (variables or {}).items():
            args.extend(['-v', '%s=%s' % (k, v)])
        return args

    def create_env(self, manifest, state, vars_store, ops_files=None,
                   variables=None):
        self.check_stream(['create-env'] + self.env_args(
            manifest, state, vars_store, ops_files, variables))

    def delete_env(self, manifest, state, vars_store, ops_files=None,
                   variables=None):
        returncode = self.stream(['delete-env'] + self.env_args(
            manifest, state, vars_store, ops_files, variables))
        if returncode != 0:
            self.log.warning('Deleting the director failed with exit code '
                             '%s' % returncode)
        return returncode

    def alias_env(self, address, ca_cert):
        self.check(['alias-env', self.environment, '-e', address,
                    '--ca-cert', ca_cert])

    def is_ready(self):
        cmd_stdout, cmd_stderr, returncode = self.run(
            self.targeted(['env']), quiet=True)
        return returncode == 0

    def wait_until_ready(self, attempts=constants.READY_ATTEMPTS,
                         interval=constants.READY_INTERVAL):
        retrying = tenacity.Retrying(
            retry=tenacity.retry_if_result(lambda ready: not ready),
            wait=tenacity.wait_fixed(interval),
            stop=tenacity.stop_after_attempt(attempts)
        )
        try:
            retrying(self.is_ready)
        except tenacity.RetryError:
            raise DirectorNotReady('Director did not become ready in time')

    def update_cloud_config(self, path):
        self.check_stream(self.targeted(['update-cloud-config', path, '-n']))

    def update_runtime_config(self, path, name):
        self.check_stream(self.targeted(['update-runtime-config', path,
                                         '--name', name, '-n']))

    def upload_stemcell(self, url):
        return self.stream(self.targeted(['upload-stemcell', url]))

    def deploy(self, manifest, ops_files=None, vars_store=None,
               variables=None):
        args = ['deploy', manifest]
        for ops in ops_files or []:
            args.extend(['-o', ops])
        if vars_store:
            args.append('--vars-store=%s' % vars_store)
        for k, v in (variables or {}).items():
            args.extend(['-v', '%s=%s' % (k, v)])
        args.append('-n')
        self.check_stream(self.targeted(args, deployment=True))

    def delete_deployment(self):
        cmd_stdout, cmd_stderr, returncode = self.run(
            self.targeted(['delete-deployment', '-n'], deployment=True))
        if returncode != 0:
            self.log.warning('Could not delete deployment %s: %s' %
                             (self.deployment, cmd_stderr.strip()))
        return returncode

    def table(self, args, deployment=False):
        '''Rows of the first table of a "--json" listing.'''
        cmd_stdout, cmd_stderr, returncode = self.run(
            self.targeted(args + ['--json'], deployment))
        if returncode != 0:
            return []
        try:
            rows = jmespath.search('Tables[0].Rows', json.loads(cmd_stdout))
        except ValueError as e:
            self.log.error('Problem parsing bosh output: %s' % e)
            return []
        return rows or []

    def deployments(self):
        return [r.get('name') for r in self.table(['deployments'])]

    def instances(self):
        return [(r.get('instance'), r.get('process_state'))
                for r in self.table(['vms'], deployment=True)]

    def vms(self, vitals=False, deployment=False):
        args = ['vms']
        if vitals:
            args.append('--vitals')
        return self.stream(self.targeted(args, deployment))

    def ssh(self, instance):
        return self.stream(self.targeted(['ssh', instance], deployment=True))

    def logs(self, instance, follow=True):
        args = ['logs', instance]
        if follow:
            args.append('--follow')
        return self.stream(self.targeted(args, deployment=True))

    def tasks(self, recent=10):
        return self.stream(self.targeted(['tasks', '--recent=%s' % recent]))

    def cancel_task(self, task_id):
        return self.stream(self.targeted(['cancel-task', str(task_id)]))

    def recreate(self):
        return self.stream(self.targeted(['recreate'], deployment=True))


class DockerRunner(BaseRunner):

    def __init__(self, docker_cmd=None, log=None):
        super(DockerRunner, self).__init__(docker_cmd or 'docker', log)

    def is_running(self):
        cmd_stdout, cmd_stderr, returncode = self.run(['info'], quiet=True)
        return returncode == 0

    def network_exists(self, name):
        cmd_stdout, cmd_stderr, returncode = self.run(
            ['network', 'inspect', name], quiet=True)
        return returncode == 0

    def network_containers(self, name):
        cmd_stdout, cmd_stderr, returncode = self.run(
            ['network', 'inspect', name, '-f',
             '{{range .Containers}}{{.Name}} {{end}}'])
        if returncode != 0:
            return []
        return cmd_stdout.split()

    def create_network(self, name, subnet, gateway, bridge_name):
        self.check([
            'network', 'create',
            '--driver', 'bridge',
            '--subnet=%s' % subnet,
            '--gateway=%s' % gateway,
            '--opt', 'com.docker.network.bridge.enable_ip_masquerade=true',
            '--opt', 'com.docker.network.bridge.name=%s' % bridge_name,
            name
        ])

    def remove_network(self, name):
        cmd_stdout, cmd_stderr, returncode = self.run(
            ['network', 'rm', name])
        if returncode != 0:
            self.log.debug('Network %s not removed: %s' %
                           (name, cmd_stderr.strip()))
        return returncode

    def container_names(self):
        cmd_stdout, cmd_stderr, returncode = self.run(
            ['ps', '-a', '--format', '{{.Names}}'])
        if returncode != 0:
            return []
        return cmd_stdout.split()

    def remove_containers(self, names):
        if not names:
            return 0
        cmd_stdout, cmd_stderr, returncode = self.run(['rm', '-f'] + names)
        if returncode != 0:
            self.log.error('Error removing containers: %s' % ' '.join(names))
            self.log.error(cmd_stderr)
        return returncode

    def network_members(self, network):
        '''Name and status of every container attached to network.'''
        cmd_stdout, cmd_stderr, returncode = self.run(
            ['ps', '--filter', 'network=%s' % network,
             '--format', '{{.Names}}\t{{.Status}}'])
        if returncode != 0:
            return []
        members = []
        for line in cmd_stdout.splitlines():
            if line:
                name, _, status = line.partition('\t')
                members.append((name, status))
        return members

    def show_containers(self, network):
        return self.stream([
            'ps', '--format', 'table {{.Names}}\t{{.Status}}\t{{.Ports}}',
            '--filter', 'network=%s' % network])

    def prune(self):
        for kind in ('container', 'image', 'volume'):
            self.log.info('Pruning unused %ss' % kind)
            self.check_stream([kind, 'prune', '-f'])


class CfRunner(BaseRunner):

    def __init__(self, cf_cmd=None, log=None):
        super(CfRunner, self).__init__(cf_cmd or 'cf', log)

    def login(self, api, user, password, skip_ssl_validation=True):
        args = ['login', '-a', api, '-u', user, '-p', password]
        if skip_ssl_validation:
            args.append('--skip-ssl-validation')
        self.check_stream(args, secrets=[password])

    def create_org(self, org):
        cmd_stdout, cmd_stderr, returncode = self.run(['create-org', org])
        if returncode != 0:
            self.log.warning('Could not create org %s' % org)
        return returncode

    def create_space(self, space):
        cmd_stdout, cmd_stderr, returncode = self.run(['create-space', space])
        if returncode != 0:
            self.log.warning('Could not create space %s' % space)
        return returncode

    def target(self, org=None, space=None):
        args = ['target']
        if org:
            args.extend(['-o', org])
        if space:
            args.extend(['-s', space])
        self.check_stream(args)


class GitRunner(BaseRunner):

    def __init__(self, git_cmd=None, log=None):
        super(GitRunner, self).__init__(git_cmd or 'git', log)

    def clone(self, url, dest, depth=1):
        self.check_stream(['clone', '--depth', str(depth), url, dest])

    def pull(self, path):
        cmd_stdout, cmd_stderr, returncode = self.run(
            ['-C', path, 'pull', '--ff-only'])
        if returncode != 0:
            self.log.debug('Could not update %s: %s' %
                           (path, cmd_stderr.strip()))
        return returncode

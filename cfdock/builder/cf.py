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

import os

from cfdock.builder import base
from cfdock import constants
from cfdock.utils import common
from cfdock import workspace


INFO_FILE = '''Cloud Foundry Connection Info
=============================
API Endpoint: {api}
Admin User: {user}
Admin Password: {password}

Login Command:
{login}
'''

INFO = '''
API Endpoint: {api}
Admin User: {user}
Admin Password: {password}

To login:
  {login}

To set up an org and space:
  cf create-org myorg
  cf target -o myorg
  cf create-space dev
  cf target -s dev

To push an app:
  cf push myapp
'''


class CFBuilder(base.BaseBuilder):

    def apply(self):
        self.deploy()
        return self.show_info()

    def system_domain(self):
        domain = self.settings.get('system_domain')
        if not domain:
            raise common.ConfigError('Unable to detect the host IP, set '
                                     'HOST_IP or SYSTEM_DOMAIN')
        return domain

    def api(self):
        return 'https://api.%s' % self.system_domain()

    def deploy(self):
        system_domain = self.system_domain()
        self.log.info('Deploying Cloud Foundry (this will take 30-60 '
                      'minutes)...')
        self.log.info('System domain: %s' % system_domain)
        self.load_director_env()

        cf_deployment = self.workspace.cf_deployment
        self.bosh.deploy(
            os.path.join(cf_deployment, 'cf-deployment.yml'),
            ops_files=[os.path.join(cf_deployment, o)
                       for o in constants.CF_OPS_FILES],
            vars_store=self.workspace.cf_creds,
            variables={'system_domain': system_domain})
        self.log.info('Cloud Foundry deployed!')

    def admin_password(self):
        try:
            return self.workspace.cf_secret('/cf_admin_password')
        except workspace.MissingStateError:
            return None

    def connection_info(self):
        api = self.api()
        password = (self.admin_password() or
                    'see %s' % self.workspace.cf_creds)
        login = ("cf login -a %s -u %s -p '%s' --skip-ssl-validation" %
                 (api, constants.ADMIN_USER, password))
        return {
            'api': api,
            'user': constants.ADMIN_USER,
            'password': password,
            'login': login,
        }

    def show_info(self):
        """Save the connection info and return it for display."""
        info = self.connection_info()
        self.log.info('Cloud Foundry Deployment Complete!')
        if os.path.isdir(self.workspace.state_dir):
            self.workspace.write_info(INFO_FILE.format(**info))
            self.log.info('Connection info saved to %s' %
                          self.workspace.info_file)
        return INFO.format(**info)

    def recorded_api(self):
        '''API endpoint saved by the last deploy, if any.'''
        if not os.path.isfile(self.workspace.info_file):
            return None
        with open(self.workspace.info_file, 'r') as f:
            for line in f:
                if line.startswith('API Endpoint:'):
                    return line.split(':', 1)[1].strip()
        return None

    def login(self):
        password = self.admin_password()
        if not password:
            raise workspace.MissingStateError(
                'CF credentials not found. Is CF deployed?')
        self.cf.login(self.recorded_api() or self.api(),
                      constants.ADMIN_USER, password)

    def setup_space(self, org='dev-org', space='dev'):
        self.login()

        self.log.info('Creating org: %s' % org)
        self.cf.create_org(org)
        self.cf.target(org=org)

        self.log.info('Creating space: %s' % space)
        self.cf.create_space(space)
        self.cf.target(space=space)
        self.log.info('Ready to push apps!')
